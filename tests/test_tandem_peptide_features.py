import sys
import os

import pytest

sys.path.append(os.path.dirname(os.path.abspath(__file__)) + "/../lib")
from tandem_exceptions import UnresolvedModificationError
from tandem_peptide_features import AMINO_ACIDS, resolve_flanks, make_full_peptide, peptide_length, strip_scheme_modifications, \
    count_ptms, tokenize_residues, count_pngasef_sites, amino_acid_frequencies
from tandem_records import SchemeModification

PTM_SCHEME = { '*': 21, '#': 35 }


def test_alphabet():
    assert AMINO_ACIDS == 'ACDEFGHIKLMNPQRSTVWY'


@pytest.mark.parametrize("pre,post,expected", [
    ('ABCK', 'RDEF', ('K', 'R')),
    ('[', ']', ('-', '-')),
    ('', None, ('-', '-')),
    ('[MK', 'PEPT', ('K', 'P')),
])
def test_resolve_flanks(pre, post, expected):
    assert resolve_flanks(pre, post) == expected


def test_peptide_length_ignores_symbols():
    assert peptide_length(make_full_peptide('K', 'PEPS*TIDE#K', 'R')) == 9
    assert peptide_length('-.GAKR.P') == 4


def test_strip_scheme_modifications():
    sequence, modifications = strip_scheme_modifications('PEPS*TIDEM#K', PTM_SCHEME)

    assert sequence == 'PEPSTIDEMK'
    assert modifications == [ SchemeModification(4, 21, '*'), SchemeModification(9, 35, '#') ]


def test_strip_leading_symbol_is_n_terminal():
    sequence, modifications = strip_scheme_modifications('#PEPTIDEK', PTM_SCHEME)

    assert sequence == 'PEPTIDEK'
    assert modifications[0].position == 0


def test_strip_unknown_symbol_raises():
    with pytest.raises(UnresolvedModificationError) as error_info:
        strip_scheme_modifications('PEP^TIDEK', PTM_SCHEME, 'run.t.xml')
    assert error_info.value.filename == 'run.t.xml'
    assert '^' in error_info.value.message


def test_count_ptms():
    assert count_ptms('K.PEPS*T*IDEM#K.R', PTM_SCHEME) == 3
    assert count_ptms('K.PEPTIDEK.R', PTM_SCHEME) == 0


def test_tokenize_residues():
    assert tokenize_residues('AN*GT') == [ [ 'A', '' ], [ 'N', '*' ], [ 'G', '' ], [ 'T', '' ] ]


def test_pngasef_target_motif():
    assert count_pngasef_sites('K.AN*GTK.R', False) == 1
    assert count_pngasef_sites('K.AN*GAK.R', False) == 0
    assert count_pngasef_sites('K.ANGTK.R', False) == 0


def test_pngasef_decoy_motif_is_reversed():
    assert count_pngasef_sites('K.KTGN*AK.R', True) == 1
    assert count_pngasef_sites('K.KTGN*AK.R', False) == 0


def test_pngasef_counts_every_site():
    assert count_pngasef_sites('K.N*GSAN*LTK.R', False) == 2


def test_amino_acid_frequencies():
    frequencies = amino_acid_frequencies('K.AAC.R')

    assert len(frequencies) == 20
    assert frequencies[AMINO_ACIDS.index('A')] == pytest.approx(2 / 3)
    assert frequencies[AMINO_ACIDS.index('C')] == pytest.approx(1 / 3)
    assert frequencies.sum() == pytest.approx(1.0)


def test_amino_acid_frequencies_count_symbols_in_length():
    frequencies = amino_acid_frequencies('K.AS*.R')

    assert frequencies[AMINO_ACIDS.index('A')] == pytest.approx(1 / 3)
    assert frequencies.sum() == pytest.approx(2 / 3)


def test_pngasef_motif_reaches_flanking_residue():
    assert count_pngasef_sites('K.PEPN*K.S', False) == 1
    assert count_pngasef_sites('K.PEPN*K.-', False) == 0
    assert count_pngasef_sites('T.KN*PEPK.R', True) == 1
    assert count_pngasef_sites('K.PEPKN*.T', False) == 0
