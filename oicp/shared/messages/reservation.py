from oicp.shared.messages.authorization import RemoteStartRequest, RemoteStopRequest
from oicp.shared.messages.enums import Namespace

RESERVATION = Namespace.RESERVATION


class AuthorizeRemoteReservationStartRequest(RemoteStartRequest):
    """A provider reserves an EVSE for one of its customers"""

    namespace = RESERVATION
    root_tag = RESERVATION.tag("eRoamingAuthorizeRemoteReservationStart")


class AuthorizeRemoteReservationStopRequest(RemoteStopRequest):
    namespace = RESERVATION
    root_tag = RESERVATION.tag("eRoamingAuthorizeRemoteReservationStop")
