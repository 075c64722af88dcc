import logging
from enum import Enum, IntEnum
from typing import Dict, Type, TypeVar

logger = logging.getLogger(__name__)

# XSD restrictions used throughout the OICP schemas
EVSE_IDS_MAX = 100
PARTNER_SESSION_ID_MAX_LEN = 250
PARTNER_PRODUCT_ID_MAX_LEN = 100
CHARGING_STATION_ID_MAX_LEN = 50
STATUS_DESCRIPTION_MAX_LEN = 200


class Namespace(str, Enum):
    COMMON_TYPES = "http://www.hubject.com/b2b/services/commontypes/v2.0"
    EVSE_DATA = "http://www.hubject.com/b2b/services/evsedata/v2.1"
    EVSE_STATUS = "http://www.hubject.com/b2b/services/evsestatus/v2.1"
    EVSE_SEARCH = "http://www.hubject.com/b2b/services/evsesearch/v2.0"
    AUTHORIZATION = "http://www.hubject.com/b2b/services/authorization/v2.0"
    AUTHENTICATION_DATA = (
        "http://www.hubject.com/b2b/services/authenticationdata/v2.0"
    )
    MOBILE_AUTHORIZATION = (
        "http://www.hubject.com/b2b/services/mobileauthorization/v2.0"
    )
    RESERVATION = "http://www.hubject.com/b2b/services/reservation/v1.0"

    def tag(self, local_name: str) -> str:
        """Qualified ElementTree tag ('{namespace}LocalName')"""
        return f"{{{self.value}}}{local_name}"


# Prefixes used when serialising, mirrors the prefixes of the Hubject samples
NAMESPACE_PREFIXES = {
    Namespace.COMMON_TYPES: "CommonTypes",
    Namespace.EVSE_DATA: "EVSEData",
    Namespace.EVSE_STATUS: "EVSEStatus",
    Namespace.EVSE_SEARCH: "EVSESearch",
    Namespace.AUTHORIZATION: "Authorization",
    Namespace.AUTHENTICATION_DATA: "AuthenticationData",
    Namespace.MOBILE_AUTHORIZATION: "MobileAuthorization",
    Namespace.RESERVATION: "Reservation",
}


class StatusCodes(IntEnum):
    """
    The OICP result codes. On the wire the code is zero padded to three
    digits, e.g. '000' for SUCCESS.
    """

    SUCCESS = 0
    HUBJECT_SYSTEM_ERROR = 1
    HUBJECT_DATABASE_ERROR = 2
    DATA_TRANSACTION_ERROR = 9
    UNAUTHORIZED_ACCESS = 17
    INCONSISTENT_EVSE_ID = 18
    INCONSISTENT_EV_CO_ID = 19
    SYSTEM_ERROR = 21
    DATA_ERROR = 22
    RFID_AUTHENTICATION_FAILED_INVALID_UID = 102
    RFID_AUTHENTICATION_FAILED_CARD_DISABLED = 103
    RFID_AUTHENTICATION_FAILED_CARD_EXPIRED = 101
    RFID_AUTHENTICATION_FAILED_PROVIDER_UNKNOWN = 105
    NO_POSITIVE_AUTHENTICATION_RESPONSE = 106
    QR_CODE_AUTHENTICATION_FAILED_INVALID_CREDENTIALS = 110
    QR_CODE_AUTHENTICATION_FAILED_TIME_OUT = 120
    QR_CODE_AUTHENTICATION_FAILED_ALREADY_IN_USE = 121
    QR_CODE_AUTHENTICATION_FAILED_NO_AVAILABLE_EVSE = 122
    REMOTE_START_NOT_ALLOWED = 200
    NO_VALID_CONTRACT = 210
    PARTNER_NOT_FOUND = 300
    PARTNER_DID_NOT_RESPOND = 310
    SERVICE_NOT_AVAILABLE = 320
    SESSION_IS_INVALID = 400
    COMMUNICATION_TO_EVSE_FAILED = 501
    NO_EV_CONNECTED_TO_EVSE = 510
    EVSE_ALREADY_RESERVED = 601
    EVSE_ALREADY_IN_USE_WRONG_TOKEN = 602
    UNKNOWN_EVSE_ID = 603
    EVSE_NOT_ELIGIBLE_FOR_RESERVATION = 604
    EVSE_OUT_OF_SERVICE = 700


class EVSEStatusType(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    OCCUPIED = "Occupied"
    OUT_OF_SERVICE = "OutOfService"
    EVSE_NOT_FOUND = "EvseNotFound"
    UNKNOWN = "Unknown"


class ActionType(str, Enum):
    FULL_LOAD = "fullLoad"
    UPDATE = "update"
    INSERT = "insert"
    DELETE = "delete"
    UNSPECIFIED = "Unspecified"


class AuthorizationStatusType(str, Enum):
    AUTHORIZED = "Authorized"
    NOT_AUTHORIZED = "NotAuthorized"
    UNSPECIFIED = "Unspecified"


class PINCrypto(str, Enum):
    MD5 = "MD5"
    SHA1 = "SHA-1"
    UNSPECIFIED = "Unspecified"


class GeoCoordinatesResponseFormat(str, Enum):
    GOOGLE = "Google"
    DECIMAL_DEGREE = "DecimalDegree"
    DEGREE_MINUTE_SECONDS = "DegreeMinuteSeconds"
    UNSPECIFIED = "Unspecified"


class PlugType(str, Enum):
    SMALL_PADDLE_INDUCTIVE = "Small Paddle Inductive"
    LARGE_PADDLE_INDUCTIVE = "Large Paddle Inductive"
    AVCON_CONNECTOR = "AVCONConnector"
    TESLA_CONNECTOR = "TeslaConnector"
    NEMA_5_20 = "NEMA 5-20"
    TYPE_E_FRENCH_STANDARD = "Type E French Standard"
    TYPE_F_SCHUKO = "Type F Schuko"
    TYPE_G_BRITISH_STANDARD = "Type G British Standard"
    TYPE_J_SWISS_STANDARD = "Type J Swiss Standard"
    TYPE_1_CONNECTOR_CABLE_ATTACHED = "Type 1 Connector (Cable Attached)"
    TYPE_2_OUTLET = "Type 2 Outlet"
    TYPE_2_CONNECTOR_CABLE_ATTACHED = "Type 2 Connector (Cable Attached)"
    TYPE_3_OUTLET = "Type 3 Outlet"
    IEC_60309_SINGLE_PHASE = "IEC 60309 Single Phase"
    IEC_60309_THREE_PHASE = "IEC 60309 Three Phase"
    CCS_COMBO_2_PLUG_CABLE_ATTACHED = "CCS Combo 2 Plug (Cable Attached)"
    CCS_COMBO_1_PLUG_CABLE_ATTACHED = "CCS Combo 1 Plug (Cable Attached)"
    CHADEMO = "CHAdeMO"
    UNSPECIFIED = "Unspecified"


class ChargingFacility(str, Enum):
    V_100_120_1_PHASE_10A = "100 - 120V, 1-Phase ≤10A"
    V_100_120_1_PHASE_16A = "100 - 120V, 1-Phase ≤16A"
    V_100_120_1_PHASE_32A = "100 - 120V, 1-Phase ≤32A"
    V_200_240_1_PHASE_10A = "200 - 240V, 1-Phase ≤10A"
    V_200_240_1_PHASE_16A = "200 - 240V, 1-Phase ≤16A"
    V_200_240_1_PHASE_32A = "200 - 240V, 1-Phase ≤32A"
    V_200_240_1_PHASE_OVER_32A = "200 - 240V, 1-Phase >32A"
    V_380_480_3_PHASE_16A = "380 - 480V, 3-Phase ≤16A"
    V_380_480_3_PHASE_32A = "380 - 480V, 3-Phase ≤32A"
    V_380_480_3_PHASE_63A = "380 - 480V, 3-Phase ≤63A"
    BATTERY_EXCHANGE = "Battery exchange"
    DC_CHARGING_20KW = "DC Charging ≤20kW"
    DC_CHARGING_50KW = "DC Charging ≤50kW"
    DC_CHARGING_OVER_50KW = "DC Charging >50kW"
    UNSPECIFIED = "Unspecified"


class ChargingMode(str, Enum):
    MODE_1 = "Mode_1"
    MODE_2 = "Mode_2"
    MODE_3 = "Mode_3"
    MODE_4 = "Mode_4"
    CHADEMO = "CHAdeMO"
    UNSPECIFIED = "Unspecified"


class AuthenticationMode(str, Enum):
    NFC_RFID_CLASSIC = "NFC RFID Classic"
    NFC_RFID_DESFIRE = "NFC RFID DESFire"
    PNC = "PnC"
    REMOTE = "REMOTE"
    DIRECT_PAYMENT = "Direct Payment"
    UNSPECIFIED = "Unspecified"


class PaymentOption(str, Enum):
    NO_PAYMENT = "No Payment"
    DIRECT = "Direct"
    CONTRACT = "Contract"
    UNSPECIFIED = "Unspecified"


class ValueAddedService(str, Enum):
    RESERVATION = "Reservation"
    DYNAMIC_PRICING = "DynamicPricing"
    PARKING_SENSORS = "ParkingSensors"
    MAXIMUM_POWER_CHARGING = "MaximumPowerCharging"
    PREDICTIVE_CHARGE_POINT_USAGE = "PredictiveChargePointUsage"
    CHARGING_PLANS = "ChargingPlans"
    NONE = "None"
    UNSPECIFIED = "Unspecified"


class Accessibility(str, Enum):
    FREE_PUBLICLY_ACCESSIBLE = "Free publicly accessible"
    RESTRICTED_ACCESS = "Restricted access"
    PAYING_PUBLICLY_ACCESSIBLE = "Paying publicly accessible"
    UNSPECIFIED = "Unspecified"


E = TypeVar("E", bound=Enum)

# The member each table falls back to for values it does not know
_FALLBACKS: Dict[Type[Enum], Enum] = {
    EVSEStatusType: EVSEStatusType.UNKNOWN,
    ActionType: ActionType.UNSPECIFIED,
    AuthorizationStatusType: AuthorizationStatusType.UNSPECIFIED,
    PINCrypto: PINCrypto.UNSPECIFIED,
    GeoCoordinatesResponseFormat: GeoCoordinatesResponseFormat.UNSPECIFIED,
    PlugType: PlugType.UNSPECIFIED,
    ChargingFacility: ChargingFacility.UNSPECIFIED,
    ChargingMode: ChargingMode.UNSPECIFIED,
    AuthenticationMode: AuthenticationMode.UNSPECIFIED,
    PaymentOption: PaymentOption.UNSPECIFIED,
    ValueAddedService: ValueAddedService.UNSPECIFIED,
    Accessibility: Accessibility.UNSPECIFIED,
}

# Spellings seen in the wild that differ from the schema value
_ALIASES: Dict[Type[Enum], Dict[str, Enum]] = {
    PaymentOption: {"NoPayment": PaymentOption.NO_PAYMENT},
    PINCrypto: {"SHA1": PINCrypto.SHA1},
    ChargingFacility: {
        "100 - 120V, 1-Phase <=10A": ChargingFacility.V_100_120_1_PHASE_10A,
        "100 - 120V, 1-Phase <=16A": ChargingFacility.V_100_120_1_PHASE_16A,
        "100 - 120V, 1-Phase <=32A": ChargingFacility.V_100_120_1_PHASE_32A,
        "200 - 240V, 1-Phase <=10A": ChargingFacility.V_200_240_1_PHASE_10A,
        "200 - 240V, 1-Phase <=16A": ChargingFacility.V_200_240_1_PHASE_16A,
        "200 - 240V, 1-Phase <=32A": ChargingFacility.V_200_240_1_PHASE_32A,
        "380 - 480V, 3-Phase <=16A": ChargingFacility.V_380_480_3_PHASE_16A,
        "380 - 480V, 3-Phase <=32A": ChargingFacility.V_380_480_3_PHASE_32A,
        "380 - 480V, 3-Phase <=63A": ChargingFacility.V_380_480_3_PHASE_63A,
        "DC Charging <=20kW": ChargingFacility.DC_CHARGING_20KW,
        "DC Charging <=50kW": ChargingFacility.DC_CHARGING_50KW,
    },
}


def parse_enum(enum_cls: Type[E], text: str, strict: bool = False) -> E:
    """
    Maps the text content of an element onto a member of one of the enum
    tables above. Values the table does not know map onto the table's
    explicit fallback member (UNSPECIFIED, or UNKNOWN for EVSE states).

    With strict=True an unknown value is only accepted if the fallback
    member can be written back, i.e. for EVSE states. Any other table
    rejects it, so that a parsed value can always be serialised again.

    Raises:
        ValueError, if the enum class has no fallback member registered,
        or if strict is set and the value is unknown
    """
    text = text.strip()
    fallback = _FALLBACKS.get(enum_cls)
    if fallback is None:
        raise ValueError(f"{enum_cls.__name__} is not a mappable OICP enum")

    for member in enum_cls:
        if member.value == text:
            return member
    alias = _ALIASES.get(enum_cls, {}).get(text)
    if alias is not None:
        return alias  # type: ignore[return-value]

    if strict and not has_wire_value(fallback):
        raise ValueError(f"'{text}' is not a known {enum_cls.__name__} value")

    logger.warning(
        f"Unknown {enum_cls.__name__} value '{text}', "
        f"mapped to {fallback.name}"
    )
    return fallback  # type: ignore[return-value]


def enum_as_text(member: Enum) -> str:
    """
    Maps an enum member back onto its wire value.

    Raises:
        ValueError, if the member is the table's fallback, which has no
        representation on the wire (except for EVSE status 'Unknown')
    """
    if not has_wire_value(member):
        raise ValueError(
            f"{type(member).__name__}.{member.name} can't be serialised"
        )
    return member.value


def is_fallback(member: Enum) -> bool:
    return _FALLBACKS.get(type(member)) is member


def has_wire_value(member: Enum) -> bool:
    return not is_fallback(member) or member is EVSEStatusType.UNKNOWN
