#!/usr/bin/env python3

import sys
import os
import argparse
import timeit
from datetime import datetime
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)
sys.path.append(os.path.dirname(os.path.realpath(__file__))+"/../lib")
from tandem_exceptions import TandemConversionError
from tandem_options import TandemOptions, parse_ptm_scheme
from tandem_document_scanner import is_meta_file, read_meta_file
from tandem_psm_builder import make_file_id
from tandem_psm_sink import PinWriter
from tandem_reader import TandemReader



####################################################################################################
#### Expand meta files (lists of input files) into the files they name
def expand_input_files(files, verbose=0):

    expanded_files = []
    for file in files:
        if is_meta_file(file):
            meta_files = read_meta_file(file)
            if verbose >= 1:
                eprint(f"INFO: Meta file '{file}' lists {len(meta_files)} input files")
            expanded_files.extend(meta_files)
        else:
            expanded_files.append(file)
    return expanded_files



####################################################################################################
#### Assemble the conversion options from a config file and the command line
def get_options(params):

    if params.config is not None:
        options = TandemOptions.read_json(params.config, verbose=params.verbose)
    else:
        options = TandemOptions()

    #### Command-line settings override the config file
    if params.hits_per_spectrum is not None:
        options.hits_per_spectrum = params.hits_per_spectrum
    if params.ptm_scheme is not None:
        options.ptm_scheme = parse_ptm_scheme(params.ptm_scheme)
    if params.enzyme is not None:
        options.enzyme = params.enzyme
    if params.decoy_pattern is not None:
        options.decoy_pattern = params.decoy_pattern
    if params.schema_file is not None:
        options.schema_file = params.schema_file
    if params.calc_ptms:
        options.calc_ptms = True
    if params.pngasef:
        options.pngasef = True
    if params.calc_aa_frequencies:
        options.calc_aa_frequencies = True
    if params.combined:
        options.is_combined = True

    options.validate()
    return options



####################################################################################################
#### Main function for command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Convert X!Tandem output files into tab-delimited PSM feature files for re-scoring')
    argparser.add_argument('--decoy_files', type=str, nargs='+', default=[], help='Filenames of X!Tandem output files from a search against decoy proteins')
    argparser.add_argument('--combined', action='count', help='If set, the input files hold both target and decoy results, told apart by the decoy pattern')
    argparser.add_argument('--decoy_pattern', action='store', help='Text in protein labels that marks decoy proteins in combined files (default random_)')
    argparser.add_argument('--hits_per_spectrum', action='store', type=int, help='Number of distinct peptides to keep per spectrum (default 1)')
    argparser.add_argument('--ptm_scheme', action='store', help="Modification symbols and their UniMod accessions (default '*:21,#:35')")
    argparser.add_argument('--enzyme', action='store', help='Digestion enzyme for the enzyme-specificity features, or no_enzyme (default trypsin)')
    argparser.add_argument('--calc_ptms', action='count', help='If set, add a feature with the number of PTMs')
    argparser.add_argument('--pngasef', action='count', help='If set, add a feature with the number of deamidated N-glycosylation sites')
    argparser.add_argument('--calc_aa_frequencies', action='count', help='If set, add amino acid frequency features')
    argparser.add_argument('--schema_file', action='store', help='XSD to validate the X!Tandem output against')
    argparser.add_argument('--config', action='store', help='JSON file with conversion settings')
    argparser.add_argument('--output_dir', action='store', default='.', help='Directory to write the .pin files to (default current directory)')
    argparser.add_argument('--halt_on_error', action='count', help='If set, stop at the first file that cannot be converted')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.3')
    argparser.add_argument('files', type=str, nargs='*', help='Filenames of one or more X!Tandem output files (or meta files listing them) to convert')
    params = argparser.parse_args()

    #### Set verbose level
    verbose = params.verbose
    if verbose is None:
        verbose = 0
    params.verbose = verbose
    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        eprint(f"INFO: Launching convert_tandem at {timestamp}")
    t0 = timeit.default_timer()

    if len(params.files) == 0 and len(params.decoy_files) == 0:
        eprint("ERROR: No input files given")
        return 1

    #### Loop over all the files to ensure that they are really there before starting work
    for file in params.files + params.decoy_files:
        if not os.path.isfile(file):
            eprint(f"ERROR: File '{file}' not found or not a file")
            return 1

    try:
        options = get_options(params)
    except ValueError as error:
        eprint(f"ERROR: {error}")
        return 1

    #### Set up the list of jobs: target files, then decoy files
    jobs = []
    for file in expand_input_files(params.files, verbose):
        jobs.append({ 'filename': file, 'is_decoy': False })
    for file in expand_input_files(params.decoy_files, verbose):
        jobs.append({ 'filename': file, 'is_decoy': True })
    if verbose >= 1:
        eprint(f"INFO: Found {len(jobs)} input files to process")

    #### Each input needs its own output file, or a later one would overwrite an earlier one
    output_sources = {}
    for job in jobs:
        job['output_filename'] = os.path.join(params.output_dir, make_file_id(job['filename']) + '.pin')
        if job['output_filename'] in output_sources:
            eprint(f"ERROR: Input files '{output_sources[job['output_filename']]}' and '{job['filename']}' would both be " +
                f"written to '{job['output_filename']}'. Rename one of them")
            return 1
        output_sources[job['output_filename']] = job['filename']

    #### Process the files one after another
    reader = TandemReader(options, verbose=verbose)
    n_failed = 0
    for job in jobs:
        sink = PinWriter(job['output_filename'], verbose=verbose)
        is_failed = False
        try:
            reader.read(job['filename'], sink, is_decoy=job['is_decoy'])
        except TandemConversionError as error:
            eprint(f"ERROR: Unable to convert '{job['filename']}': {error.message}")
            is_failed = True
        except OSError as error:
            eprint(f"ERROR: Unable to write '{job['output_filename']}' for '{job['filename']}': {error}")
            is_failed = True

        if is_failed:
            n_failed += 1
            if params.halt_on_error:
                eprint("ERROR: Halting at the first failed file as requested")
                break

    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        t1 = timeit.default_timer()
        eprint(f"INFO: convert_tandem finished {len(jobs) - n_failed} of {len(jobs)} files in {t1-t0:.2f} seconds at {timestamp}")

    if n_failed > 0:
        return 1
    return 0



if __name__ == "__main__": sys.exit(main())
