#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import timeit

#### Import the local modules
from tandem_exceptions import TandemConversionError
from tandem_options import TandemOptions
from tandem_document_scanner import TandemDocumentScanner
from tandem_capabilities import probe_capabilities, build_feature_schema
from tandem_psm_builder import PsmBuilder


####################################################################################################
#### TandemReader class: converts X!Tandem output files into PSMs with feature vectors
class TandemReader:


    ####################################################################################################
    #### Constructor
    def __init__(self, options=None, verbose=None):

        #### Store and check the conversion settings
        if options is None:
            options = TandemOptions()
        options.validate()
        self.options = options

        #### Per file statistics and the record of problems seen
        self.stats = {}
        self.problems = self.get_empty_problems()
        self.state = { 'status': 'OK', 'code': 'OK', 'message': 'No problems' }

        #### Set verbosity
        if verbose is None: verbose = 0
        self.verbose = verbose


    ####################################################################################################
    #### Get empty stats
    def get_empty_stats(self):
        empty_stats = {
                'n_spectra': 0,
                'n_psms': 0,
                'n_target_psms': 0,
                'n_decoy_psms': 0,
                'n_duplicate_hits': 0,
                'n_over_limit_hits': 0,
                'n_ignored_channel_readings': 0,
                'min_charge': None,
                'max_charge': None,
                'channels': [],
                'n_features': 0,
                'elapsed_time': 0.0,
            }
        return empty_stats


    def get_empty_problems(self):
        return {
            'warnings': { 'count': 0, 'list': [], 'codes': {} },
            'errors': { 'count': 0, 'list': [], 'codes': {} },
        }


    ####################################################################################################
    #### First pass: find the ion channels and the charge range of a file
    def probe(self, filename, stats=None):

        if self.verbose >= 1:
            eprint(f"INFO: Probing ion series and charge range of {filename}")

        scanner = TandemDocumentScanner(filename, schema_file=self.options.schema_file, verbose=self.verbose)
        if not scanner.check_validity():
            self.log_event('WARNING', 'NotBiomlFile', f"File '{filename}' does not look like X!Tandem BIOML output")

        capabilities = probe_capabilities(scanner.iter_spectra(), filename, stats)

        if stats is not None and stats['n_ignored_channel_readings'] > 0:
            self.log_event('WARNING', 'LateIonSeries', f"{stats['n_ignored_channel_readings']} ion series readings in '{filename}' " +
                "belong to series absent from the first spectrum and are ignored")
        if self.verbose >= 1:
            eprint(f"INFO: Found ion series [{','.join(capabilities.present_channels)}] and charges {capabilities.min_charge} to {capabilities.max_charge}")

        return capabilities


    ####################################################################################################
    #### Read a file, sending one PSM per retained candidate to the sink
    def read(self, filename, sink, is_decoy=False):

        #### Set up information
        t0 = timeit.default_timer()
        stats = self.get_empty_stats()
        self.stats[filename] = stats
        progress_intro = False
        sink_is_open = False

        try:
            capabilities = self.probe(filename, stats)
            feature_schema = build_feature_schema(capabilities, self.options)
            stats['min_charge'] = capabilities.min_charge
            stats['max_charge'] = capabilities.max_charge
            stats['channels'] = list(capabilities.present_channels)
            stats['n_features'] = len(feature_schema)

            builder = PsmBuilder(capabilities, feature_schema, self.options, filename, log_event=self.log_event, verbose=self.verbose)

            if self.verbose >= 1:
                eprint(f"INFO: Reading spectra of {filename} with {len(feature_schema)} features")

            sink.begin(filename, feature_schema)
            sink_is_open = True

            #### Second pass: build and emit the PSMs spectrum by spectrum
            scanner = TandemDocumentScanner(filename, schema_file=self.options.schema_file, verbose=self.verbose)
            for spectrum in scanner.iter_spectra():
                for spectrum_id, psm in builder.build_spectrum_psms(spectrum, is_decoy):
                    sink.save(spectrum_id, psm)

                #### Update counters and print progress
                stats['n_spectra'] += 1
                if self.verbose >= 1 and stats['n_spectra'] % 5000 == 0:
                    if not progress_intro:
                        eprint("INFO: Reading spectra.. ", end='')
                        progress_intro = True
                    eprint(f"{stats['n_spectra']}.. ", end='', flush=True)

        except TandemConversionError as error:
            self.log_event('ERROR', error.code, str(error))
            raise

        finally:
            if progress_intro:
                eprint('')
            if sink_is_open:
                sink.end(filename)

        for key, value in builder.stats.items():
            stats[key] = value

        #### Print final timing information
        t1 = timeit.default_timer()
        stats['elapsed_time'] = t1 - t0
        if self.verbose >= 1:
            eprint(f"INFO: Read {stats['n_spectra']} spectra and created {stats['n_psms']} PSMs " +
                f"({stats['n_target_psms']} target, {stats['n_decoy_psms']} decoy) from {filename} in {t1-t0:.2f} seconds")

        return stats


    ####################################################################################################
    #### Log an event
    def log_event(self, status, code, message):

        if status == 'WARNING':
            category = 'warnings'
        elif status == 'ERROR':
            category = 'errors'
        else:
            raise ValueError(f"Unrecognized event status '{status}'")

        #### Record the event
        full_message = f"{status}: [{code}]: {message}"
        self.problems[category]['count'] += 1
        self.problems[category]['list'].append(full_message)
        if code not in self.problems[category]['codes']:
            self.problems[category]['codes'][code] = 1
        else:
            self.problems[category]['codes'][code] += 1

        #### If this is an error, also update the overall state
        if status == 'ERROR':
            self.state['status'] = status
            self.state['code'] = code
            self.state['message'] = message
        elif self.verbose >= 1:
            eprint(full_message)
