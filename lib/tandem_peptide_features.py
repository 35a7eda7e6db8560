#!/usr/bin/env python3

#### Import technical modules and pyteomics
import numpy
from pyteomics import parser

#### Import the local data model and exceptions
from tandem_exceptions import UnresolvedModificationError
from tandem_records import SchemeModification
from tandem_enzymes import TERMINUS

#### The canonical amino acid alphabet, in the order the frequency features are laid out
AMINO_ACIDS = ''.join(sorted(parser.std_amino_acids))

#### The default symbol for deamidation used when counting PNGase F sites
DEAMIDATION_SYMBOL = '*'


####################################################################################################
#### Work out the flanking residues from the pre and post strings of a domain
def resolve_flanks(pre, post):
    """
    X!Tandem writes up to four residues before and after the peptide, with '[' and ']' for the
    protein termini. Only the residue next to the peptide is kept.
    """
    if pre is None or pre == '' or pre == '[':
        flank_n = TERMINUS
    else:
        flank_n = pre[-1]

    if post is None or post == '' or post == ']':
        flank_c = TERMINUS
    else:
        flank_c = post[0]

    return flank_n, flank_c


def make_full_peptide(flank_n, sequence, flank_c):
    return f"{flank_n}.{sequence}.{flank_c}"


#### The peptide part of a flanked peptide such as K.PEPTIDE.R
def peptide_core(full_peptide):
    return full_peptide[2:-2]


####################################################################################################
#### Number of canonical residues of a flanked peptide
def peptide_length(full_peptide):
    return len([ residue for residue in peptide_core(full_peptide) if residue in AMINO_ACIDS ])


####################################################################################################
#### Remove the PTM scheme symbols from a sequence
def strip_scheme_modifications(sequence, ptm_scheme, filename=None):
    """
    Each symbol that is not a canonical residue must be in the PTM scheme. The symbol modifies the
    residue before it, so its position is the 1-based index of that residue (0 for the N-terminus).
    Returns the plain sequence and the list of SchemeModification.
    """
    residues = []
    modifications = []
    for symbol in sequence:
        if symbol in AMINO_ACIDS:
            residues.append(symbol)
            continue
        if symbol not in ptm_scheme:
            raise UnresolvedModificationError(f"Peptide sequence {sequence} contains modification {symbol} that is not in the PTM scheme", filename)
        modifications.append(SchemeModification(len(residues), ptm_scheme[symbol], symbol))

    return ''.join(residues), modifications


####################################################################################################
#### Number of PTM scheme symbols in a flanked peptide
def count_ptms(full_peptide, ptm_scheme):
    return len([ symbol for symbol in peptide_core(full_peptide) if symbol in ptm_scheme ])


####################################################################################################
#### Split a peptide with symbols into residues, each with the string of symbols that follow it
def tokenize_residues(peptide):
    tokens = []
    for symbol in peptide:
        if symbol in AMINO_ACIDS or len(tokens) == 0:
            tokens.append([ symbol, '' ])
        else:
            tokens[-1][1] += symbol
    return tokens


####################################################################################################
#### Count deamidated N-glycosylation sites (N*-X-S/T), which PNGase F treatment leaves behind
def count_pngasef_sites(full_peptide, is_decoy, deamidation_symbol=DEAMIDATION_SYMBOL):
    """
    Decoy peptides made by reversal carry the motif backwards, as S/T-X-N*. The partner residue
    may be a flanking residue, so a site at the peptide end is still counted.
    """
    tokens = [ [ full_peptide[0], '' ] ] + tokenize_residues(peptide_core(full_peptide)) + [ [ full_peptide[-1], '' ] ]
    n_sites = 0
    for i_token, (residue, symbols) in enumerate(tokens[1:-1], start=1):
        if residue != 'N' or deamidation_symbol not in symbols:
            continue
        if is_decoy:
            i_partner = i_token - 2
        else:
            i_partner = i_token + 2
        if 0 <= i_partner < len(tokens) and tokens[i_partner][0] in 'ST':
            n_sites += 1
    return n_sites


####################################################################################################
#### Relative frequency of each canonical amino acid in a flanked peptide
def amino_acid_frequencies(full_peptide):

    core = peptide_core(full_peptide)
    frequencies = numpy.zeros(len(AMINO_ACIDS))
    if len(core) == 0:
        return frequencies

    for symbol in core:
        position = AMINO_ACIDS.find(symbol)
        if position >= 0:
            frequencies[position] += 1
    return frequencies / len(core)
