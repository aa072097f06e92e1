"""
Services package.

Provides business logic layer between API and core algorithms.

Modules:
    segmentation_service: Main segmentation pipeline for tracks and fix lists
    routing_service: Walking route lookup for walking segments
"""

from services.segmentation_service import (
    analyze_fixes,
    analyze_track_data,
    analyze_track_file,
    SegmentationAnalysisResult
)
from services.routing_service import RoutingService, RouteGeometry, get_routing_service

__all__ = [
    'analyze_fixes',
    'analyze_track_data',
    'analyze_track_file',
    'SegmentationAnalysisResult',
    'RoutingService',
    'RouteGeometry',
    'get_routing_service',
]
