#!/usr/bin/env python3

#### Import some standard modules
import re

#### Import technical modules and pyteomics
from pyteomics import parser

#### Names that mean no enzyme-specificity features should be computed
NO_ENZYME_NAMES = [ 'no_enzyme', 'no-enzyme', 'none', '' ]

#### Short names commonly used on the command line mapped to the pyteomics rule names
ENZYME_ALIASES = {
    'chymotrypsin': 'chymotrypsin high specificity',
    'lys-c': 'lysc',
    'glu-c': 'glutamyl endopeptidase',
    'gluc': 'glutamyl endopeptidase',
    'aspn': 'asp-n',
    'argc': 'arg-c',
    'pepsin': 'pepsin ph2.0',
}

#### Symbol used for the protein terminus in flanking residues
TERMINUS = '-'


####################################################################################################
#### Enzyme class: answers whether bonds in a peptide are consistent with a cleavage rule
class Enzyme:

    ####################################################################################################
    #### Constructor
    def __init__(self, name, rule):
        self.name = name
        self.rule = rule
        self.regex = re.compile(rule)


    ####################################################################################################
    #### Is there a cleavage site between residue n and the following residue c
    def is_enzymatic(self, n, c):

        #### Protein termini are always consistent with the enzyme
        if n == TERMINUS or c == TERMINUS:
            return True

        for match in self.regex.finditer(n + c):
            if match.end() == 1:
                return True
        return False


    ####################################################################################################
    #### Count the internal cleavage sites of a peptide (missed cleavages)
    def count_enzymatic(self, peptide):

        sites = set()
        for match in self.regex.finditer(peptide):
            if 0 < match.end() < len(peptide):
                sites.add(match.end())
        return len(sites)


####################################################################################################
#### Return an Enzyme for the given name, or None if no enzyme is to be used
def get_enzyme(name):

    if name is None:
        return None
    key = name.strip().lower()
    if key in NO_ENZYME_NAMES:
        return None

    key = ENZYME_ALIASES.get(key, key)
    if key not in parser.expasy_rules:
        raise ValueError(f"Unknown enzyme '{name}'. Known enzymes are: {', '.join(sorted(parser.expasy_rules))}")

    return Enzyme(key, parser.expasy_rules[key])
