from typing import Any


class InvalidIdentifierError(ValueError):
    """
    Is thrown when a string does not match the grammar of an OICP identifier
    (provider ID, EVSE ID, EVCO ID, ...). It is a ValueError so that pydantic
    turns it into a ValidationError when it surfaces in a model field.
    """

    def __init__(self, identifier_type: str, value: Any, reason: str = ""):
        self.identifier_type = identifier_type
        self.value = value
        self.reason = reason
        ValueError.__init__(
            self,
            f"Invalid {identifier_type} '{value}'" + (f": {reason}" if reason else ""),
        )


class XMLMappingError(Exception):
    """
    Base class for all errors raised while mapping an XML element onto a
    message or data type (the shape of the document is not what the OICP
    schema requires)
    """


class MissingElementError(XMLMappingError):
    """Is thrown when a required element or attribute is absent"""

    def __init__(self, name: str):
        XMLMappingError.__init__(self, f"Missing required element '{name}'")
        self.name = name


class InvalidElementValueError(XMLMappingError):
    """
    Is thrown when an element is present but its text content could not be
    converted. The original exception is available as __cause__.
    """

    def __init__(self, name: str, value: Any, reason: str):
        XMLMappingError.__init__(
            self, f"Invalid value '{value}' for element '{name}': {reason}"
        )
        self.name = name
        self.value = value
        self.reason = reason


class ChoiceError(XMLMappingError):
    """
    Is thrown when none or more than one of the shapes of a choice group
    (e.g. Identification, GeoCoordinates) is present
    """


class NoIdentificationFoundError(ChoiceError):
    """Is thrown when an Identification element holds none of its variants"""

    def __init__(self):
        ChoiceError.__init__(self, "No EVCO identification found in request.")


class UnexpectedRootElementError(XMLMappingError):
    """
    Is thrown (or reported) when a document's root element is not the
    operation the parsing class stands for
    """

    def __init__(self, expected: str, actual: str):
        XMLMappingError.__init__(
            self, f"Expected root element '{expected}' but got '{actual}'"
        )
        self.expected = expected
        self.actual = actual


class XMLEncodingError(Exception):
    """Is thrown when a message could not be serialised into an XML document"""


class XMLDecodingError(Exception):
    """
    Is thrown when an incoming XML document could not be turned into one of
    the known OICP messages
    """


class CustomParserError(Exception):
    """
    Is thrown when a custom parser hook handed to try_parse() returns no
    message instead of the one it was given or a replacement
    """

    def __init__(self, message_name: str):
        Exception.__init__(self, f"Custom parser returned no {message_name}")
        self.message_name = message_name


class ResponseBuilderError(Exception):
    """
    Is thrown when trying to set an attribute on a ResponseBuilder that is
    not a field of the response it is building
    """

    def __init__(self, response_name: str, field: str):
        Exception.__init__(self, f"{response_name} has no field '{field}'")
        self.response_name = response_name
        self.field = field


class InvalidSettingsValueError(Exception):
    """
    Is thrown when a setting is read and the value is invalid.
    The 'entity' field tells which group of settings the value belongs to.
    """

    def __init__(self, entity: str, setting: str, invalid_value: Any):
        Exception.__init__(self)
        self.entity = entity
        self.setting = setting
        self.invalid_value = invalid_value
