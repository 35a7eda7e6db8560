#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os

#### Import technical modules
import pandas as pd

#### Columns of the tab-delimited Percolator input that are not features
PIN_LEADING_COLUMNS = [ 'SpecId', 'Label', 'ScanNr' ]
PIN_TRAILING_COLUMNS = [ 'Peptide', 'Proteins' ]


####################################################################################################
#### Format a PSM peptide the way the re-scoring engine expects it: K.PEPT[UNIMOD:21]IDE.R
def format_pin_peptide(psm):
    flank_n = '-'
    flank_c = '-'
    if len(psm.occurrences) > 0:
        flank_n = psm.occurrences[0].flank_n
        flank_c = psm.occurrences[0].flank_c
    return f"{flank_n}.{psm.peptide.modified_sequence()}.{flank_c}"


####################################################################################################
#### PsmCollection class: keeps all PSMs in memory, keyed by file and spectrum id
class PsmCollection:


    ####################################################################################################
    #### Constructor
    def __init__(self, verbose=None):

        #### Per file: the feature schema and the PSMs by spectrum id
        self.files = {}
        self.current_file = None

        #### Set verbosity
        if verbose is None: verbose = 0
        self.verbose = verbose


    def begin(self, filename, feature_schema):
        self.files[filename] = { 'feature_schema': list(feature_schema), 'spectra': {} }
        self.current_file = filename


    def save(self, spectrum_id, psm):
        spectra = self.files[self.current_file]['spectra']
        if spectrum_id not in spectra:
            spectra[spectrum_id] = []
        spectra[spectrum_id].append(psm)


    def end(self, filename):
        if self.verbose >= 1:
            eprint(f"INFO: Collected {len(self.get_psms(filename))} PSMs from {filename}")
        self.current_file = None


    ####################################################################################################
    #### Accessors
    def feature_names(self, filename):
        return [ name for name, default in self.files[filename]['feature_schema'] ]


    def get_psms(self, filename=None):
        psms = []
        for this_filename, file_data in self.files.items():
            if filename is not None and this_filename != filename:
                continue
            for spectrum_psms in file_data['spectra'].values():
                psms.extend(spectrum_psms)
        return psms


    def get_spectrum_psms(self, filename, spectrum_id):
        return self.files[filename]['spectra'].get(spectrum_id, [])


    ####################################################################################################
    #### Return the PSMs of one file as a pandas DataFrame with one column per feature
    def to_dataframe(self, filename):

        feature_names = self.feature_names(filename)
        rows = []
        for psm in self.get_psms(filename):
            row = [ psm.psm_id, 1 if not psm.is_decoy else -1, psm.spectrum_id ]
            row += [ float(value) for value in psm.features ]
            row += [ format_pin_peptide(psm), ';'.join([ occurrence.label for occurrence in psm.occurrences ]) ]
            rows.append(row)

        column_name_list = PIN_LEADING_COLUMNS + feature_names + PIN_TRAILING_COLUMNS
        return pd.DataFrame(rows, columns=column_name_list)


####################################################################################################
#### PinWriter class: streams PSMs to a tab-delimited Percolator input file
class PinWriter:


    ####################################################################################################
    #### Constructor
    def __init__(self, output_filename, verbose=None):

        self.output_filename = output_filename
        self.outfile = None
        self.n_psms = 0

        #### Set verbosity
        if verbose is None: verbose = 0
        self.verbose = verbose


    def begin(self, filename, feature_schema):

        output_dir = os.path.dirname(self.output_filename)
        if output_dir != '' and not os.path.isdir(output_dir):
            os.makedirs(output_dir)

        self.outfile = open(self.output_filename, 'w')
        header = PIN_LEADING_COLUMNS + [ name for name, default in feature_schema ] + PIN_TRAILING_COLUMNS
        self.n_psms = 0
        print("\t".join(header), file=self.outfile)

        if self.verbose >= 1:
            eprint(f"INFO: Writing PSMs of {filename} to {self.output_filename}")


    def save(self, spectrum_id, psm):

        row = [ psm.psm_id, '-1' if psm.is_decoy else '1', str(spectrum_id) ]
        row += [ f"{value:.10g}" for value in psm.features ]
        row.append(format_pin_peptide(psm))

        #### Proteins are the last columns, one per column as the re-scoring engine reads them
        row += [ occurrence.label for occurrence in psm.occurrences ]
        print("\t".join(row), file=self.outfile)
        self.n_psms += 1


    def end(self, filename):
        self.close()
        if self.verbose >= 1:
            eprint(f"INFO: Wrote {self.n_psms} PSMs to {self.output_filename}")


    def close(self):
        if self.outfile is not None:
            self.outfile.close()
            self.outfile = None
