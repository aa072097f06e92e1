"""
Walking route lookup service.

This module asks a directions provider (OpenRouteService) for a routed
walking path between the endpoints of a walking segment. The geometry is only
used to decorate walking segments on the map; it plays no part in the
segmentation itself.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from core.models.segment import Segment
from config.settings import RoutingConfig

logger = logging.getLogger(__name__)


@dataclass
class RouteGeometry:
    """A routed path between two points."""
    coordinates: List[Tuple[float, float]] = field(default_factory=list)  # (longitude, latitude)
    distance: Optional[float] = None  # meters
    duration: Optional[float] = None  # seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coordinates': [list(c) for c in self.coordinates],
            'distance': self.distance,
            'duration': self.duration,
        }


def parse_route_response(payload: Dict[str, Any]) -> Optional[RouteGeometry]:
    """
    Extract the first route from a GeoJSON directions response.

    Args:
        payload: Decoded JSON body

    Returns:
        RouteGeometry, or None if the response holds no route
    """
    features = payload.get('features') or []
    if not features:
        return None

    feature = features[0]
    coordinates = [(float(c[0]), float(c[1])) for c in feature['geometry']['coordinates']]
    summary = (feature.get('properties') or {}).get('summary') or {}

    return RouteGeometry(
        coordinates=coordinates,
        distance=summary.get('distance'),
        duration=summary.get('duration')
    )


class RoutingService:
    """
    Client for the directions provider.

    A missing API key leaves the service unconfigured; lookups then return
    None without making a request.
    """

    def __init__(self,
                 api_key: str,
                 base_url: str = RoutingConfig.BASE_URL,
                 profile: str = RoutingConfig.PROFILE,
                 timeout: float = RoutingConfig.TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.profile = profile
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def directions_url(self) -> str:
        return f"{self.base_url}/v2/directions/{self.profile}"

    def fetch_route(self, segment: Segment) -> Optional[RouteGeometry]:
        """
        Look up a routed path between the first and last fix of a segment.

        Args:
            segment: Segment whose endpoints are routed

        Returns:
            RouteGeometry, or None if the lookup failed
        """
        if not self.is_configured:
            logger.warning("Routing API key not configured, skipping route lookup")
            return None

        start, end = segment.endpoints
        params = {
            'api_key': self.api_key,
            'start': f"{start.longitude},{start.latitude}",
            'end': f"{end.longitude},{end.latitude}",
        }

        try:
            response = self.session.get(self.directions_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return parse_route_response(response.json())
        except requests.RequestException as e:
            logger.error(f"Route lookup failed for segment [{segment.start_idx}, {segment.end_idx}]: {e}")
            return None
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected route response for segment [{segment.start_idx}, {segment.end_idx}]: {e}")
            return None

    def fetch_walking_routes(self, segments: List[Segment]) -> List[Optional[RouteGeometry]]:
        """
        Look up routes for a list of walking segments.

        Returns:
            One entry per segment, None where the lookup failed
        """
        routes = [self.fetch_route(segment) for segment in segments]
        found = sum(1 for route in routes if route is not None)
        logger.info(f"Fetched {found} of {len(segments)} walking routes")
        return routes

    def close(self) -> None:
        """Release the pooled HTTP connections."""
        self.session.close()


def get_routing_service() -> RoutingService:
    """
    Get a RoutingService configured from the environment.

    Returns:
        RoutingService instance
    """
    return RoutingService(api_key=RoutingConfig.api_key())
