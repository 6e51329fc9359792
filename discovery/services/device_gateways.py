# discovery/services/device_gateways.py
from typing import Any, Mapping, Optional

from discovery.errors import PositionUnavailable
from discovery.models import Coordinates
from discovery.services.collaborators import PermissionStatus

GRANTED_VALUES = {"granted", "true", "1", "yes"}


class RequestLocationGateway:
    """
    Permission + GPS as reported by the calling device.

    The client asks the OS for foreground location permission and, when it
    has a fix, sends it along with the request. This gateway replays that
    answer to the resolver.
    """

    def __init__(self, permission_granted: bool, coordinates: Optional[Coordinates] = None):
        self.permission_granted = permission_granted
        self.coordinates = coordinates

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "RequestLocationGateway":
        permission = str(args.get("permission", "")).strip().lower()
        coords = Coordinates.parse({"lat": args.get("lat"), "lon": args.get("lon", args.get("lng"))})
        return cls(permission_granted=permission in GRANTED_VALUES, coordinates=coords)

    async def request_foreground_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.permission_granted else PermissionStatus.DENIED

    async def get_current_position(self) -> Coordinates:
        if self.coordinates is None:
            raise PositionUnavailable("Device did not report a usable position")
        return self.coordinates
