#!/usr/bin/env python3

#### Import some standard modules
import math
from collections import namedtuple

#### Import the local data model and exceptions
from tandem_exceptions import MissingChargeError, EmptyFileError
from tandem_records import ION_CHANNELS
from tandem_peptide_features import AMINO_ACIDS

#### Default values of the features, used by the re-scoring engine before the first training round
FEATURE_DEFAULT_VALUES = {
    'hyperscore': 0.8,
    'deltaScore': 1.9,
    'frac_ion_b': 0.0,
    'frac_ion_y': 0.0,
    'Mass': 0.0,
    'dM': 0.0,
    'absdM': -0.03,
    'PepLen': 0.0,
    'Charge2': 0.0,
    'Charge3': 0.0,
    'enzN': 0.0,
    'enzC': 0.0,
    'enzInt': 0.0,
}


####################################################################################################
#### DetectedCapabilities: what the first pass learned about a file
class DetectedCapabilities(namedtuple('DetectedCapabilities', [ 'channels', 'min_charge', 'max_charge' ])):
    """
    channels is a frozenset of the ion series letters that have both a score and an ion count in the
    first spectrum with any domains. The charge range covers every spectrum of the file.
    """
    __slots__ = ()

    def has_channel(self, channel):
        return channel in self.channels

    #### The present channels in feature order
    @property
    def present_channels(self):
        return tuple( [ channel for channel in ION_CHANNELS if channel in self.channels ] )

    @property
    def charges(self):
        return list(range(self.min_charge, self.max_charge + 1))


####################################################################################################
#### Detect the ion channels of one spectrum
def detect_channels(spectrum):
    channels = set()
    for protein, domain in spectrum.iter_domains():
        for channel in ION_CHANNELS:
            reading = domain.channels[channel]
            if reading is not None and reading.is_complete():
                channels.add(channel)
    return frozenset(channels)


####################################################################################################
#### Fold over all spectra of a file to find the ion channels and the charge range
def probe_capabilities(spectra, filename=None, stats=None):
    """
    Channels are taken from the first spectrum that has any domains and are not revisited. Channels
    that only show up in later spectra are counted in stats['n_ignored_channel_readings'] when a
    stats dict is supplied.
    """
    min_charge = math.inf
    max_charge = -math.inf
    channels = None
    n_spectra = 0
    n_ignored_channel_readings = 0

    for spectrum in spectra:
        if spectrum.charge is None:
            raise MissingChargeError(f"Missing charge (attribute z in group element) for spectrum '{spectrum.spectrum_id}'", filename)

        min_charge = min(min_charge, spectrum.charge)
        max_charge = max(max_charge, spectrum.charge)
        n_spectra += 1

        if channels is None:
            if spectrum.has_domains():
                channels = detect_channels(spectrum)
        elif stats is not None:
            n_ignored_channel_readings += len(detect_channels(spectrum) - channels)

    if n_spectra == 0:
        raise EmptyFileError("The file does not contain any spectrum records", filename)

    if stats is not None:
        stats['n_ignored_channel_readings'] = n_ignored_channel_readings

    if channels is None:
        channels = frozenset()
    return DetectedCapabilities(channels, int(min_charge), int(max_charge))


####################################################################################################
#### Build the ordered list of (name, default) that every feature vector of a file follows
def build_feature_schema(capabilities, options):

    names = [ 'hyperscore', 'deltaScore' ]
    names += [ f"frac_ion_{channel}" for channel in capabilities.present_channels ]
    names += [ 'Mass', 'dM', 'absdM', 'PepLen' ]
    names += [ f"Charge{charge}" for charge in capabilities.charges ]

    if options.get_enzyme() is not None:
        names += [ 'enzN', 'enzC', 'enzInt' ]
    if options.calc_ptms:
        names.append('ptm')
    if options.pngasef:
        names.append('PNGaseF')
    if options.calc_aa_frequencies:
        names += [ f"{residue}-Freq" for residue in AMINO_ACIDS ]

    return [ (name, FEATURE_DEFAULT_VALUES.get(name, 0.0)) for name in names ]
