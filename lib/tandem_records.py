#!/usr/bin/env python3

#### Import some standard modules
from collections import namedtuple

#### Import the exception taxonomy
from tandem_exceptions import SchemaValidationError

#### The six optional ion series reported by X!Tandem, in the order features are laid out
ION_CHANNELS = ( 'a', 'b', 'c', 'x', 'y', 'z' )

#### Attributes of a spectrum group that must be present before PSMs are created
REQUIRED_SPECTRUM_ATTRIBUTES = ( 'id', 'mh', 'z', 'sumI', 'maxI', 'fI' )

#### Attributes of a domain that must be present before a PSM is created
REQUIRED_DOMAIN_ATTRIBUTES = ( 'mh', 'delta', 'hyperscore', 'nextscore', 'seq' )


####################################################################################################
#### Small helpers for working with lxml elements
def local_name(element):
    """
    Return the tag name of an element with any namespace removed, or None for comments and
    processing instructions
    """
    tag = element.tag
    if not isinstance(tag, str):
        return None
    return tag.rpartition('}')[2]


def child_elements(element, name):
    return [ child for child in element if local_name(child) == name ]


def get_float(element, attribute, filename=None):
    value = element.get(attribute)
    if value is None or value.strip() == '':
        return None
    try:
        return float(value)
    except ValueError:
        raise SchemaValidationError(f"Attribute '{attribute}' of element '{local_name(element)}' is not a number: '{value}'", filename)


def get_int(element, attribute, filename=None):
    value = element.get(attribute)
    if value is None or value.strip() == '':
        return None
    try:
        return int(value)
    except ValueError:
        raise SchemaValidationError(f"Attribute '{attribute}' of element '{local_name(element)}' is not an integer: '{value}'", filename)


def sanitize_label(label):
    """
    Strip everything but printable ASCII from a protein label
    """
    if label is None:
        return ''
    return ''.join( [ character for character in label if ' ' <= character <= '~' ] )


####################################################################################################
#### A single ion series reading of a domain. Either value may be missing in the document
class ChannelReading(namedtuple('ChannelReading', [ 'score', 'ions' ])):
    __slots__ = ()

    def is_complete(self):
        return self.score is not None and self.ions is not None


####################################################################################################
#### A modification element (aa) as found in the document
AminoAcidModification = namedtuple('AminoAcidModification', [ 'at', 'modified', 'residue' ])


####################################################################################################
#### Resolved modifications. Two kinds: a symbol in the sequence mapped through the PTM scheme,
#### and a free modification given explicitly in the document
class SchemeModification(namedtuple('SchemeModification', [ 'position', 'accession', 'symbol' ])):
    __slots__ = ()
    kind = 'scheme'

    def as_string(self):
        return f"[UNIMOD:{self.accession}]"


class FreeModification(namedtuple('FreeModification', [ 'position', 'mass', 'residue' ])):
    __slots__ = ()
    kind = 'free'

    def as_string(self):
        mass = self.mass
        if not mass.startswith('-') and not mass.startswith('+'):
            mass = '+' + mass
        return f"[{mass}]"


####################################################################################################
#### A protein occurrence of a PSM with the flanking residues of the peptide in that protein
ProteinOccurrence = namedtuple('ProteinOccurrence', [ 'label', 'flank_n', 'flank_c' ])


####################################################################################################
#### Domain class: one candidate alignment of a peptide to the spectrum
class Domain:

    ####################################################################################################
    #### Constructor
    def __init__(self, sequence=None, calculated_mass=None, mass_delta=None, hyperscore=None, next_hyperscore=None,
                 pre=None, post=None, start=None, end=None, channels=None, modifications=None):

        self.sequence = sequence
        self.calculated_mass = calculated_mass
        self.mass_delta = mass_delta
        self.hyperscore = hyperscore
        self.next_hyperscore = next_hyperscore
        self.pre = pre
        self.post = post
        self.start = start
        self.end = end

        #### One entry per ion channel, None when the document has nothing for that series
        if channels is None:
            channels = {}
        self.channels = { channel: channels.get(channel) for channel in ION_CHANNELS }

        if modifications is None:
            modifications = []
        self.modifications = modifications


    ####################################################################################################
    #### Build a Domain from a domain element
    @classmethod
    def from_element(cls, element, filename=None):

        channels = {}
        for channel in ION_CHANNELS:
            score = get_float(element, f"{channel}_score", filename)
            ions = get_float(element, f"{channel}_ions", filename)
            if score is not None or ions is not None:
                channels[channel] = ChannelReading(score, ions)

        modifications = []
        for aa_element in child_elements(element, 'aa'):
            at = get_int(aa_element, 'at', filename)
            modified = aa_element.get('modified')
            if at is None or modified is None:
                raise SchemaValidationError(f"Modification on peptide '{element.get('seq')}' lacks the 'at' or 'modified' attribute", filename)
            modifications.append(AminoAcidModification(at, modified.strip(), aa_element.get('type')))

        return cls(
            sequence=element.get('seq'),
            calculated_mass=get_float(element, 'mh', filename),
            mass_delta=get_float(element, 'delta', filename),
            hyperscore=get_float(element, 'hyperscore', filename),
            next_hyperscore=get_float(element, 'nextscore', filename),
            pre=element.get('pre'),
            post=element.get('post'),
            start=get_int(element, 'start', filename),
            end=get_int(element, 'end', filename),
            channels=channels,
            modifications=modifications)


    ####################################################################################################
    #### Return the names of required attributes that are missing
    def missing_attributes(self):
        values = {
            'mh': self.calculated_mass,
            'delta': self.mass_delta,
            'hyperscore': self.hyperscore,
            'nextscore': self.next_hyperscore,
            'seq': self.sequence,
        }
        return [ name for name in REQUIRED_DOMAIN_ATTRIBUTES if values[name] is None or values[name] == '' ]


####################################################################################################
#### The candidate peptides a protein contributes to a spectrum
class PeptideCandidateGroup:

    def __init__(self, domains=None):
        if domains is None:
            domains = []
        self.domains = domains


####################################################################################################
#### A protein element of a spectrum group
class ProteinMatch:

    def __init__(self, label, peptide=None):
        self.label = sanitize_label(label)
        if peptide is None:
            peptide = PeptideCandidateGroup()
        self.peptide = peptide

    @classmethod
    def from_element(cls, element, filename=None):
        domains = []
        for peptide_element in child_elements(element, 'peptide'):
            for domain_element in child_elements(peptide_element, 'domain'):
                domains.append(Domain.from_element(domain_element, filename))
        return cls(element.get('label'), PeptideCandidateGroup(domains))


####################################################################################################
#### SpectrumResult class: one model group of the document
class SpectrumResult:

    ####################################################################################################
    #### Constructor
    def __init__(self, spectrum_id=None, observed_mass=None, charge=None, sum_intensity=None, max_intensity=None,
                 normalized_intensity=None, proteins=None):

        self.spectrum_id = spectrum_id
        self.observed_mass = observed_mass
        self.charge = charge
        self.sum_intensity = sum_intensity
        self.max_intensity = max_intensity
        self.normalized_intensity = normalized_intensity

        if proteins is None:
            proteins = []
        self.proteins = proteins


    ####################################################################################################
    #### Build a SpectrumResult from a group element
    @classmethod
    def from_element(cls, element, filename=None):

        proteins = [ ProteinMatch.from_element(protein_element, filename) for protein_element in child_elements(element, 'protein') ]

        return cls(
            spectrum_id=get_int(element, 'id', filename),
            observed_mass=get_float(element, 'mh', filename),
            charge=get_int(element, 'z', filename),
            sum_intensity=get_float(element, 'sumI', filename),
            max_intensity=get_float(element, 'maxI', filename),
            normalized_intensity=get_float(element, 'fI', filename),
            proteins=proteins)


    ####################################################################################################
    #### True if there is at least one domain anywhere below this spectrum
    def has_domains(self):
        for protein in self.proteins:
            if len(protein.peptide.domains) > 0:
                return True
        return False


    def iter_domains(self):
        for protein in self.proteins:
            for domain in protein.peptide.domains:
                yield protein, domain


    def missing_attributes(self):
        values = {
            'id': self.spectrum_id,
            'mh': self.observed_mass,
            'z': self.charge,
            'sumI': self.sum_intensity,
            'maxI': self.max_intensity,
            'fI': self.normalized_intensity,
        }
        return [ name for name in REQUIRED_SPECTRUM_ATTRIBUTES if values[name] is None ]


####################################################################################################
#### Peptide of a PSM: the sequence without modification symbols plus its modifications
class Peptide:

    def __init__(self, sequence, modifications=None):
        self.sequence = sequence
        if modifications is None:
            modifications = []
        self.modifications = modifications


    ####################################################################################################
    #### Render the sequence with bracketed modifications after the residue they sit on
    def modified_sequence(self):
        nterm = ''
        suffixes = {}
        for modification in self.modifications:
            if modification.position <= 0:
                nterm += modification.as_string()
            else:
                suffixes.setdefault(modification.position, []).append(modification.as_string())

        residues = []
        for i_residue, residue in enumerate(self.sequence, start=1):
            residues.append(residue + ''.join(suffixes.get(i_residue, [])))
        if nterm != '':
            nterm += '-'
        return nterm + ''.join(residues)


####################################################################################################
#### PSMRecord class: the finished peptide-spectrum match handed to a sink
class PSMRecord:

    ####################################################################################################
    #### Constructor
    def __init__(self, psm_id, spectrum_id, is_decoy, observed_mass, calculated_mass, charge, features, peptide,
                 occurrences=None, rank=1):

        self.psm_id = psm_id
        self.spectrum_id = spectrum_id
        self.is_decoy = is_decoy
        self.observed_mass = observed_mass
        self.calculated_mass = calculated_mass
        self.charge = charge
        self.features = features
        self.peptide = peptide
        self.rank = rank

        if occurrences is None:
            occurrences = []
        self.occurrences = occurrences


    def to_dict(self):
        return {
            'psm_id': self.psm_id,
            'spectrum_id': self.spectrum_id,
            'is_decoy': self.is_decoy,
            'observed_mass': self.observed_mass,
            'calculated_mass': self.calculated_mass,
            'charge': self.charge,
            'rank': self.rank,
            'features': [ float(value) for value in self.features ],
            'peptide': self.peptide.sequence,
            'modifications': [ [ modification.kind, modification.position, modification.as_string() ] for modification in self.peptide.modifications ],
            'proteins': [ [ occurrence.label, occurrence.flank_n, occurrence.flank_c ] for occurrence in self.occurrences ],
        }
