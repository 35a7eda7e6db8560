#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os

#### Import technical modules
import numpy

#### Import the local data model, exceptions and feature helpers
from tandem_exceptions import RequiredAttributeError, ModificationPositionOutOfRangeError
from tandem_records import FreeModification, Peptide, ProteinOccurrence, PSMRecord
from tandem_peptide_features import resolve_flanks, make_full_peptide, peptide_length, strip_scheme_modifications, \
    count_ptms, count_pngasef_sites, amino_acid_frequencies


####################################################################################################
#### The identifier of a file used in PSM ids: the base name up to the first dot
def make_file_id(filename):
    file_id = os.path.basename(filename)
    return file_id.split('.')[0]


def make_psm_id(file_id, observed_mass, spectrum_id, charge, rank):
    return f"{file_id}_{observed_mass:g}_{spectrum_id}_{charge}_{rank}"


####################################################################################################
#### Map each peptide sequence of a spectrum to the set of protein labels it came from
def build_peptide_protein_map(spectrum):
    peptide_protein_map = {}
    for protein, domain in spectrum.iter_domains():
        peptide_protein_map.setdefault(domain.sequence, set()).add(protein.label)
    return peptide_protein_map


####################################################################################################
#### PsmBuilder class: turns the domains of a spectrum into PSM records
class PsmBuilder:


    ####################################################################################################
    #### Constructor
    def __init__(self, capabilities, feature_schema, options, filename, log_event=None, verbose=None):

        self.capabilities = capabilities
        self.feature_schema = feature_schema
        self.options = options
        self.filename = filename
        self.file_id = make_file_id(filename)
        self.enzyme = options.get_enzyme()

        #### Where to send warnings. Defaults to printing them
        self.log_event = log_event

        self.stats = { 'n_psms': 0, 'n_target_psms': 0, 'n_decoy_psms': 0, 'n_duplicate_hits': 0, 'n_over_limit_hits': 0 }

        #### Set verbosity
        if verbose is None: verbose = 0
        self.verbose = verbose


    ####################################################################################################
    #### Report a non-fatal problem
    def warn(self, code, message):
        if self.log_event is not None:
            self.log_event('WARNING', code, message)
        elif self.verbose >= 1:
            eprint(f"WARNING: [{code}]: {message}")


    ####################################################################################################
    #### Generate (spectrum_id, PSMRecord) for the retained domains of a spectrum
    def build_spectrum_psms(self, spectrum, is_decoy=False):

        missing = spectrum.missing_attributes()
        if len(missing) > 0:
            raise RequiredAttributeError(f"Spectrum '{spectrum.spectrum_id}' lacks required attribute(s) {', '.join(missing)}", self.filename)

        #### The protein sets must be complete before the decoy status of any PSM can be decided
        peptide_protein_map = build_peptide_protein_map(spectrum)

        seen_peptides = set()
        rank = 1
        for protein, domain in spectrum.iter_domains():
            if domain.sequence in seen_peptides:
                self.stats['n_duplicate_hits'] += 1
                continue
            if rank > self.options.hits_per_spectrum:
                self.stats['n_over_limit_hits'] += 1
                continue
            seen_peptides.add(domain.sequence)

            psm = self.create_psm(spectrum, domain, rank, is_decoy, peptide_protein_map)
            rank += 1
            yield spectrum.spectrum_id, psm


    ####################################################################################################
    #### Decide target or decoy for a PSM given all the proteins its peptide maps to
    def resolve_decoy(self, protein_labels, is_decoy):
        if not self.options.is_combined:
            return is_decoy
        for label in protein_labels:
            if self.options.decoy_pattern in label:
                return True
        return False


    ####################################################################################################
    #### Resolve the scheme and free modifications of a domain
    def resolve_modifications(self, domain):

        sequence, modifications = strip_scheme_modifications(domain.sequence, self.options.ptm_scheme, self.filename)

        for aa_modification in domain.modifications:
            if domain.start is None or domain.end is None or not domain.start <= aa_modification.at <= domain.end:
                raise ModificationPositionOutOfRangeError(f"Peptide sequence {sequence} contains modification [{aa_modification.modified}] at protein position " +
                    f"{aa_modification.at}, which is outside of the peptide interval [{domain.start},{domain.end}]", self.filename)

            position = aa_modification.at - domain.start + 1
            if aa_modification.residue is not None and position <= len(sequence) and sequence[position - 1] != aa_modification.residue:
                self.warn('ModifiedResidueMismatch', f"Modification [{aa_modification.modified}] of {aa_modification.residue} at position {position} of {sequence} is on residue {sequence[position - 1]}")
            modifications.append(FreeModification(position, aa_modification.modified, aa_modification.residue))

        return Peptide(sequence, modifications)


    ####################################################################################################
    #### Calculate the features of a domain and create the PSM
    def create_psm(self, spectrum, domain, rank, is_decoy, peptide_protein_map):

        missing = domain.missing_attributes()
        if len(missing) > 0:
            raise RequiredAttributeError(f"Domain of spectrum '{spectrum.spectrum_id}' lacks required attribute(s) {', '.join(missing)}", self.filename)

        protein_labels = sorted(peptide_protein_map[domain.sequence])
        is_decoy = self.resolve_decoy(protein_labels, is_decoy)

        flank_n, flank_c = resolve_flanks(domain.pre, domain.post)
        full_peptide = make_full_peptide(flank_n, domain.sequence, flank_c)
        peptide = self.resolve_modifications(domain)
        length = len(peptide.sequence)

        #### Main scores
        features = [ domain.hyperscore, domain.hyperscore - domain.next_hyperscore ]

        #### Ion fractions. A channel missing on this domain counts as zero ions
        for channel in self.capabilities.present_channels:
            reading = domain.channels[channel]
            ions = 0.0
            if reading is not None and reading.ions is not None:
                ions = reading.ions
            features.append(ions / length if length > 0 else 0.0)

        #### Mass
        features += [ spectrum.observed_mass, domain.mass_delta, abs(domain.mass_delta) ]
        features.append(peptide_length(full_peptide))

        #### Charge
        for charge in self.capabilities.charges:
            features.append(1.0 if spectrum.charge == charge else 0.0)

        #### Enzyme
        if self.enzyme is not None:
            features.append(1.0 if length > 0 and self.enzyme.is_enzymatic(flank_n, peptide.sequence[0]) else 0.0)
            features.append(1.0 if length > 0 and self.enzyme.is_enzymatic(peptide.sequence[-1], flank_c) else 0.0)
            features.append(float(self.enzyme.count_enzymatic(peptide.sequence)))

        if self.options.calc_ptms:
            features.append(float(count_ptms(full_peptide, self.options.ptm_scheme)))
        if self.options.pngasef:
            features.append(float(count_pngasef_sites(full_peptide, is_decoy)))
        if self.options.calc_aa_frequencies:
            features += list(amino_acid_frequencies(full_peptide))

        features = numpy.array(features, dtype=numpy.float64)
        assert len(features) == len(self.feature_schema), \
            f"Feature vector has {len(features)} values but the schema has {len(self.feature_schema)}"

        occurrences = [ ProteinOccurrence(label, flank_n, flank_c) for label in protein_labels ]
        psm_id = make_psm_id(self.file_id, spectrum.observed_mass, spectrum.spectrum_id, spectrum.charge, rank)

        self.stats['n_psms'] += 1
        if is_decoy:
            self.stats['n_decoy_psms'] += 1
        else:
            self.stats['n_target_psms'] += 1

        return PSMRecord(psm_id, spectrum.spectrum_id, is_decoy, spectrum.observed_mass, domain.calculated_mass,
            spectrum.charge, features, peptide, occurrences, rank=rank)
