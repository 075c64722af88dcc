"""
This module contains functions used by various pydantic validators throughout
the OICP data types and messages. Saves duplicated code.
"""

from typing import List, Sized


def validate_collection_size(
    var_name: str, collection: Sized, min_len: int, max_len: int
) -> bool:
    """
    Checks whether the number of items of a repeated element stays within the
    bounds the XSD schema allows.

    var_name
        Name of the field being checked
    collection
        The sequence holding the repeated values
    min_len
        The lower bound (inclusive) of the allowed number of items
    max_len
        The upper bound (inclusive) of the allowed number of items
    """
    if not min_len <= len(collection) <= max_len:
        raise ValueError(
            f"{var_name} holds {len(collection)} items, but the allowed "
            f"range is [{min_len}..{max_len}]"
        )
    return True


def one_field_must_be_set(
    field_options: List[str], values: dict, mutually_exclusive: bool = False
) -> bool:
    """
    Several OICP types are a choice between two or more shapes, where all
    shapes are defined as optional fields in the corresponding model but at
    least one or exactly one of them needs to be set. For example, an
    Identification is either an RFID UID, a QR code, a Plug&Charge or a
    remote identification.

    Args:
        field_options: List of optional field names of a model.
        values: The dict with the model's fields
        mutually_exclusive: If true, then exactly one of the given field options
                            must be set. Otherwise, at least one of the given
                            field options must be set.
    """
    set_fields: List = []
    for field_name in field_options:
        field = values.get(f"{field_name}")
        # Check for "is not None" so that falsy values like 0 or "" count as set
        if field is not None:
            set_fields.append(field_name)

    if mutually_exclusive and len(set_fields) != 1:
        raise ValueError(
            f"Exactly one field must be set but {len(set_fields)} "
            "are set instead. "
            f"\nSet fields: {set_fields}"
            f"\nField options: {field_options}"
        )

    if len(set_fields) == 0:
        raise ValueError(
            "At least one of these optional fields must be set "
            f"but {len(set_fields)} are set: {field_options}"
        )

    return True
