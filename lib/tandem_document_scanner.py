#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import gzip
import zlib

#### Import technical modules
from lxml import etree

#### Import the local data model and exceptions
from tandem_exceptions import FileAccessError, SchemaValidationError
from tandem_records import SpectrumResult, local_name

#### The value of the type attribute of a group holding the results for one spectrum
MODEL_GROUP_TYPE = 'model'


####################################################################################################
#### Open a plain or gzipped file for binary reading
def open_tandem_file(filename):

    if not os.path.isfile(filename):
        raise FileAccessError("File not found or not a file", filename)

    try:
        if filename.endswith('.gz'):
            return gzip.open(filename, 'rb')
        return open(filename, 'rb')
    except OSError as error:
        raise FileAccessError(f"Cannot open file for reading: {error}", filename)


####################################################################################################
#### Read the first few non-empty lines of a file as text
def read_first_lines(filename, n_lines):

    lines = []
    infile = open_tandem_file(filename)
    try:
        for line in infile:
            if not isinstance(line, str):
                line = str(line, 'utf-8', 'ignore')
            line = line.strip()
            if line == '':
                continue
            lines.append(line)
            if len(lines) >= n_lines:
                break
    except (OSError, EOFError, zlib.error) as error:
        raise FileAccessError(f"Cannot read file: {error}", filename)
    finally:
        infile.close()
    return lines


####################################################################################################
#### A meta file is a plain list of input files, one per line, rather than an XML document
def is_meta_file(filename):
    lines = read_first_lines(filename, 1)
    if len(lines) == 0:
        return False
    return not lines[0].startswith('<?xml')


def read_meta_file(filename):
    files = []
    with open(filename) as infile:
        for line in infile:
            line = line.strip()
            if line == '' or line.startswith('#'):
                continue
            files.append(line)
    return files


####################################################################################################
#### TandemDocumentScanner class
class TandemDocumentScanner:


    ####################################################################################################
    #### Constructor
    def __init__(self, filename, schema_file=None, verbose=None):

        self.filename = filename
        self.schema_file = schema_file
        self.schema = None

        #### Counters for the last pass over the file
        self.stats = { 'n_groups': 0, 'n_model_groups': 0 }

        #### Set verbosity
        if verbose is None: verbose = 0
        self.verbose = verbose


    ####################################################################################################
    #### Check that the file looks like an X!Tandem BIOML document
    def check_validity(self):

        lines = read_first_lines(self.filename, 5)
        if len(lines) == 0 or not lines[0].startswith('<?xml'):
            return False
        for line in lines[1:]:
            if '<bioml' in line:
                return True
        return False


    ####################################################################################################
    #### Load the XSD if one was given
    def load_schema(self):

        if self.schema_file is None:
            return None
        if self.schema is not None:
            return self.schema

        if self.verbose >= 1:
            eprint(f"INFO: Loading XML schema {self.schema_file}")
        try:
            self.schema = etree.XMLSchema(etree.parse(self.schema_file))
        except OSError as error:
            raise FileAccessError(f"Cannot read XML schema '{self.schema_file}': {error}", self.filename)
        except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as error:
            raise SchemaValidationError(f"Cannot parse XML schema '{self.schema_file}': {error}", self.filename)
        return self.schema


    ####################################################################################################
    #### Stream the top-level model groups of the document. Each call reopens the file
    def iter_groups(self):

        schema = self.load_schema()
        self.stats = { 'n_groups': 0, 'n_model_groups': 0 }
        infile = open_tandem_file(self.filename)

        #### Depth 1 is the root element, so top-level groups end when depth returns to 1
        depth = 0
        try:
            context = etree.iterparse(infile, events=('start', 'end'), schema=schema, remove_comments=True,
                remove_pis=True, huge_tree=True)
            for event, element in context:
                if event == 'start':
                    depth += 1
                    continue
                depth -= 1
                if depth != 1:
                    continue

                self.stats['n_groups'] += 1
                if local_name(element) == 'group' and element.get('type') == MODEL_GROUP_TYPE:
                    self.stats['n_model_groups'] += 1
                    yield element

                #### Free the memory of everything read so far
                element.clear()
                parent = element.getparent()
                while element.getprevious() is not None:
                    del parent[0]

        except etree.DocumentInvalid as error:
            raise SchemaValidationError(f"Document does not conform to the schema: {error}", self.filename)
        except etree.XMLSyntaxError as error:
            raise SchemaValidationError(f"Unable to parse XML: {error}", self.filename)
        #### A truncated or corrupt gzip stream surfaces as EOFError or zlib.error
        except (OSError, EOFError, zlib.error) as error:
            raise FileAccessError(f"Error while reading file: {error}", self.filename)
        finally:
            infile.close()

        if self.verbose >= 2:
            eprint(f"INFO: Scanned {self.stats['n_groups']} top-level elements, {self.stats['n_model_groups']} spectrum groups in {self.filename}")


    ####################################################################################################
    #### Stream the spectrum results of the document
    def iter_spectra(self):
        for element in self.iter_groups():
            yield SpectrumResult.from_element(element, self.filename)
