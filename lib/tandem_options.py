#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import json
import copy

#### Import the enzyme lookup so that bad enzyme names are caught early
from tandem_enzymes import get_enzyme

#### Default PTM scheme: the symbol in a sequence and the UniMod accession it stands for
DEFAULT_PTM_SCHEME = { '*': 21, '#': 35 }

#### Default settings, also the set of keys accepted in a JSON configuration file
DEFAULT_OPTIONS = {
    'hits_per_spectrum': 1,
    'ptm_scheme': DEFAULT_PTM_SCHEME,
    'enzyme': 'trypsin',
    'calc_ptms': False,
    'pngasef': False,
    'calc_aa_frequencies': False,
    'is_combined': False,
    'decoy_pattern': 'random_',
    'schema_file': None,
}


####################################################################################################
#### Parse a PTM scheme string like '*:21,#:35' into a dict
def parse_ptm_scheme(scheme_string):

    ptm_scheme = {}
    if scheme_string is None or scheme_string.strip() == '':
        return ptm_scheme

    for entry in scheme_string.split(','):
        entry = entry.strip()
        if entry == '':
            continue
        symbol, separator, accession = entry.partition(':')
        if separator == '' or len(symbol) != 1:
            raise ValueError(f"Unable to parse PTM scheme entry '{entry}'. Expected symbol:accession such as '*:21'")
        try:
            ptm_scheme[symbol] = int(accession.upper().replace('UNIMOD', '').strip(' :'))
        except ValueError:
            raise ValueError(f"PTM scheme entry '{entry}' does not have an integer UniMod accession")
    return ptm_scheme


####################################################################################################
#### TandemOptions class: the settings consumed by the converter
class TandemOptions:


    ####################################################################################################
    #### Constructor
    def __init__(self, **kwargs):

        for key, value in DEFAULT_OPTIONS.items():
            setattr(self, key, copy.deepcopy(value))

        for key, value in kwargs.items():
            if key not in DEFAULT_OPTIONS:
                raise ValueError(f"Unknown option '{key}'")
            setattr(self, key, value)

        if isinstance(self.ptm_scheme, str):
            self.ptm_scheme = parse_ptm_scheme(self.ptm_scheme)


    ####################################################################################################
    #### Create options from a dict, ignoring keys whose value is None
    @classmethod
    def from_dict(cls, settings):
        return cls(**{ key: value for key, value in settings.items() if value is not None })


    ####################################################################################################
    #### Create options from a JSON configuration file
    @classmethod
    def read_json(cls, filename, verbose=0):

        if not os.path.isfile(filename):
            raise ValueError(f"Configuration file '{filename}' not found or not a file")
        with open(filename) as infile:
            try:
                settings = json.load(infile)
            except json.JSONDecodeError as error:
                raise ValueError(f"Cannot parse JSON from configuration file '{filename}': {error}")

        if not isinstance(settings, dict):
            raise ValueError(f"Configuration file '{filename}' is JSON, but not an object of settings")
        if verbose >= 1:
            eprint(f"INFO: Read {len(settings)} settings from configuration file '{filename}'")
        return cls.from_dict(settings)


    ####################################################################################################
    #### Check that the settings make sense. Raises ValueError if not
    def validate(self):

        if not isinstance(self.hits_per_spectrum, int) or isinstance(self.hits_per_spectrum, bool) or self.hits_per_spectrum < 1:
            raise ValueError(f"hits_per_spectrum must be a positive integer, not '{self.hits_per_spectrum}'")

        for symbol, accession in self.ptm_scheme.items():
            if len(symbol) != 1:
                raise ValueError(f"PTM scheme symbol '{symbol}' must be a single character")
            if not isinstance(accession, int):
                raise ValueError(f"PTM scheme accession for '{symbol}' must be an integer UniMod accession")

        if self.is_combined and (self.decoy_pattern is None or self.decoy_pattern == ''):
            raise ValueError("A decoy pattern is needed to process combined target-decoy files")

        #### Raises ValueError for an unknown enzyme
        get_enzyme(self.enzyme)


    ####################################################################################################
    #### Return the Enzyme to use, or None
    def get_enzyme(self):
        return get_enzyme(self.enzyme)


    def to_dict(self):
        return { key: copy.deepcopy(getattr(self, key)) for key in DEFAULT_OPTIONS }
