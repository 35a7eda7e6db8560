import sys
import os

import pytest

sys.path.append(os.path.dirname(os.path.abspath(__file__)) + "/../lib")
from tandem_enzymes import get_enzyme, TERMINUS


@pytest.fixture
def trypsin():
    return get_enzyme('trypsin')


@pytest.mark.parametrize("n,c,expected", [
    ('K', 'A', True),
    ('R', 'G', True),
    ('K', 'P', False),
    ('A', 'K', False),
    ('W', 'P', False),
    (TERMINUS, 'A', True),
    ('A', TERMINUS, True),
])
def test_trypsin_bonds(trypsin, n, c, expected):
    assert trypsin.is_enzymatic(n, c) == expected


def test_trypsin_exception_rule(trypsin):
    assert trypsin.count_enzymatic('AWKPA') == 1
    assert trypsin.count_enzymatic('AGKPA') == 0


@pytest.mark.parametrize("peptide,expected", [
    ('PEPTIDEK', 0),
    ('AEKALR', 1),
    ('AKRGKR', 3),
    ('AKPLR', 0),
])
def test_trypsin_internal_sites(trypsin, peptide, expected):
    assert trypsin.count_enzymatic(peptide) == expected


def test_no_enzyme_names():
    for name in [ 'no_enzyme', 'None', '', None ]:
        assert get_enzyme(name) is None


def test_aliases_resolve_to_rules():
    assert get_enzyme('Lys-C').name == 'lysc'
    assert get_enzyme('lys-c').is_enzymatic('K', 'A')
    assert get_enzyme('chymotrypsin').name == 'chymotrypsin high specificity'


def test_unknown_enzyme_raises():
    with pytest.raises(ValueError) as error_info:
        get_enzyme('pacman')
    assert 'pacman' in str(error_info.value)
