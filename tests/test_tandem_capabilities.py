import sys
import os

import pytest

sys.path.append(os.path.dirname(os.path.abspath(__file__)) + "/../lib")
from tandem_capabilities import DetectedCapabilities, probe_capabilities, build_feature_schema, detect_channels
from tandem_exceptions import MissingChargeError, EmptyFileError
from tandem_options import TandemOptions
from tandem_records import SpectrumResult
from tandem_test_utils import make_domain, make_spectrum


def test_channels_come_from_first_spectrum_only():
    first = make_spectrum([ ('PROT_A', [ make_domain('PEPTIDEK', channels={ 'b': (5.0, 3), 'y': (6.0, 4) }) ]) ])
    later = make_spectrum([ ('PROT_B', [ make_domain('SAMPLER', channels={ 'a': (1.0, 2), 'b': (5.0, 3), 'y': (6.0, 4) }) ]) ], spectrum_id=2)
    stats = {}

    capabilities = probe_capabilities([ first, later ], stats=stats)

    assert capabilities.present_channels == ( 'b', 'y' )
    assert not capabilities.has_channel('a')
    assert stats['n_ignored_channel_readings'] == 1


def test_channels_skip_spectra_without_domains():
    empty = make_spectrum([], spectrum_id=1)
    populated = make_spectrum([ ('PROT_A', [ make_domain('PEPTIDEK', channels={ 'x': (2.0, 1), 'z': (3.0, 2) }) ]) ], spectrum_id=2)

    capabilities = probe_capabilities([ empty, populated ])

    assert capabilities.present_channels == ( 'x', 'z' )


def test_channel_needs_score_and_ions():
    domain = make_domain('PEPTIDEK', channels={ 'b': (5.0, None), 'y': (6.0, 4) })
    spectrum = make_spectrum([ ('PROT_A', [ domain ]) ])

    assert detect_channels(spectrum) == frozenset([ 'y' ])


def test_charge_range_covers_all_spectra():
    spectra = [ make_spectrum([], spectrum_id=i_spectrum, charge=charge) for i_spectrum, charge in enumerate([ 3, 1, 4, 2 ], start=1) ]

    capabilities = probe_capabilities(spectra)

    assert capabilities.min_charge == 1
    assert capabilities.max_charge == 4
    assert capabilities.charges == [ 1, 2, 3, 4 ]
    for spectrum in spectra:
        assert capabilities.min_charge <= spectrum.charge <= capabilities.max_charge


def test_missing_charge_raises():
    spectra = [ make_spectrum([], spectrum_id=1), SpectrumResult(spectrum_id=2, observed_mass=900.0) ]

    with pytest.raises(MissingChargeError):
        probe_capabilities(spectra, filename='run.t.xml')


def test_no_spectra_raises():
    with pytest.raises(EmptyFileError) as error_info:
        probe_capabilities([], filename='run.t.xml')
    assert 'run.t.xml' in str(error_info.value)


def test_feature_schema_default_layout():
    capabilities = DetectedCapabilities(frozenset([ 'y', 'b' ]), 2, 3)

    schema = build_feature_schema(capabilities, TandemOptions())

    assert [ name for name, default in schema ] == [ 'hyperscore', 'deltaScore', 'frac_ion_b', 'frac_ion_y', 'Mass', 'dM', 'absdM',
        'PepLen', 'Charge2', 'Charge3', 'enzN', 'enzC', 'enzInt' ]
    defaults = dict(schema)
    assert defaults['hyperscore'] == 0.8
    assert defaults['deltaScore'] == 1.9
    assert defaults['absdM'] == -0.03


def test_feature_schema_with_all_options():
    capabilities = DetectedCapabilities(frozenset([ 'a', 'b', 'c', 'x', 'y', 'z' ]), 1, 1)
    options = TandemOptions(enzyme='no_enzyme', calc_ptms=True, pngasef=True, calc_aa_frequencies=True)

    names = [ name for name, default in build_feature_schema(capabilities, options) ]

    assert names[2:8] == [ 'frac_ion_a', 'frac_ion_b', 'frac_ion_c', 'frac_ion_x', 'frac_ion_y', 'frac_ion_z' ]
    assert 'enzN' not in names
    assert names[names.index('Charge1') + 1:names.index('Charge1') + 3] == [ 'ptm', 'PNGaseF' ]
    assert names[-20:] == [ f"{residue}-Freq" for residue in 'ACDEFGHIKLMNPQRSTVWY' ]
    assert len(names) == 2 + 6 + 4 + 1 + 2 + 20
