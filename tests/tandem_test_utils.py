import os
import sys

sys.path.append(os.path.dirname(os.path.abspath(__file__)) + "/../lib")
from tandem_records import ChannelReading, AminoAcidModification, Domain, PeptideCandidateGroup, ProteinMatch, SpectrumResult


#### Ion series written on domains unless a test asks otherwise
DEFAULT_CHANNELS = { 'b': (5.0, 3), 'y': (6.0, 4) }


####################################################################################################
#### Build X!Tandem BIOML text
def domain_xml(seq, start=10, end=None, mh=1000.0, delta=0.01, hyperscore=30.0, nextscore=20.0, pre='ABCK', post='RDEF',
               channels=None, mods=None, omit=None):

    if end is None:
        end = start + len(seq) - 1
    if channels is None:
        channels = DEFAULT_CHANNELS
    if mods is None:
        mods = []
    if omit is None:
        omit = []

    attributes = { 'id': '1.1.1.1', 'start': start, 'end': end, 'expect': '0.01', 'mh': mh, 'delta': delta,
        'hyperscore': hyperscore, 'nextscore': nextscore, 'pre': pre, 'post': post, 'seq': seq }
    for channel, (score, ions) in channels.items():
        attributes[f"{channel}_score"] = score
        attributes[f"{channel}_ions"] = ions

    attribute_string = ' '.join([ f'{key}="{value}"' for key, value in attributes.items() if key not in omit ])
    mod_string = ''.join([ f'<aa type="{residue}" at="{at}" modified="{modified}" />\n' for residue, at, modified in mods ])
    return f"<domain {attribute_string}>\n{mod_string}</domain>\n"


def protein_xml(label, domains):
    return f'<protein expect="-1.0" id="1.1" uid="1" label="{label}" sumI="5.0">\n' + \
        f'<note label="description">{label}</note>\n<file type="peptide" URL="test.fasta"/>\n' + \
        '<peptide start="1" end="500">\n' + ''.join(domains) + '</peptide>\n</protein>\n'


def group_xml(spectrum_id, proteins, z=2, mh=1000.5, omit=None):

    if omit is None:
        omit = []
    attributes = { 'id': spectrum_id, 'mh': mh, 'z': z, 'expect': '0.01', 'label': f"scan {spectrum_id}", 'type': 'model',
        'sumI': 5.2, 'maxI': 100000, 'fI': 1000 }
    attribute_string = ' '.join([ f'{key}="{value}"' for key, value in attributes.items() if key not in omit ])
    support = '<group label="supporting data" type="support">\n' + \
        '<GAML:trace label="1.hyper" type="hyperscore expectation function"><GAML:attribute type="a0">4.1</GAML:attribute></GAML:trace>\n' + \
        '</group>\n'
    return f"<group {attribute_string}>\n" + ''.join(proteins) + support + "</group>\n"


def document_xml(groups, with_parameters=True, namespace=None):

    xmlns = ''
    if namespace is not None:
        xmlns = f' xmlns="{namespace}"'
    parameters = ''
    if with_parameters:
        parameters = '<group label="input parameters" type="parameters">\n' + \
            '<note type="input" label="spectrum, fragment monoisotopic mass error">0.4</note>\n</group>\n'
    return '<?xml version="1.0"?>\n' + \
        '<?xml-stylesheet type="text/xsl" href="tandem-style.xsl"?>\n' + \
        f'<bioml{xmlns} xmlns:GAML="http://www.bioml.com/gaml/" label="models from \'test.mgf\'">\n' + \
        ''.join(groups) + parameters + '</bioml>\n'


####################################################################################################
#### Build the data model directly, for tests that do not need a file
def make_domain(seq, start=10, end=None, hyperscore=30.0, nextscore=20.0, mh=1000.0, delta=0.01, pre='ABCK', post='RDEF',
                channels=None, mods=None):

    if end is None:
        end = start + len(seq) - 1
    if channels is None:
        channels = DEFAULT_CHANNELS
    readings = { channel: ChannelReading(score, ions) for channel, (score, ions) in channels.items() }
    modifications = [ AminoAcidModification(at, modified, residue) for residue, at, modified in (mods or []) ]
    return Domain(sequence=seq, calculated_mass=mh, mass_delta=delta, hyperscore=hyperscore, next_hyperscore=nextscore,
        pre=pre, post=post, start=start, end=end, channels=readings, modifications=modifications)


def make_spectrum(proteins, spectrum_id=1, charge=2, mh=1000.5):
    """
    proteins is a list of (label, [ Domain, ... ])
    """
    protein_matches = [ ProteinMatch(label, PeptideCandidateGroup(domains)) for label, domains in proteins ]
    return SpectrumResult(spectrum_id=spectrum_id, observed_mass=mh, charge=charge, sum_intensity=5.2,
        max_intensity=100000.0, normalized_intensity=1000.0, proteins=protein_matches)
