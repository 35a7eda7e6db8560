#!/usr/bin/env python3

####################################################################################################
#### Exceptions raised while converting an X!Tandem output file.
#### All of them are fatal for the file being processed, the caller decides what to do next.


####################################################################################################
#### Base class for all conversion problems
class TandemConversionError(Exception):

    def __init__(self, message, filename=None):
        self.message = message
        self.filename = filename
        if filename is not None:
            message = f"{message} (file '{filename}')"
        super().__init__(message)

    #### Short code used in the event log
    @property
    def code(self):
        return self.__class__.__name__


####################################################################################################
#### The document could not be obtained as a validated tree
class DocumentReadError(TandemConversionError):
    pass


class FileAccessError(DocumentReadError):
    pass


class SchemaValidationError(DocumentReadError):
    pass


####################################################################################################
#### Problems found while probing or walking the spectra
class MissingChargeError(TandemConversionError):
    pass


class EmptyFileError(TandemConversionError):
    pass


class RequiredAttributeError(TandemConversionError):
    pass


####################################################################################################
#### Problems resolving modifications on a candidate peptide
class UnresolvedModificationError(TandemConversionError):
    pass


class ModificationPositionOutOfRangeError(TandemConversionError):
    pass
