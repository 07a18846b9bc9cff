"""Core synthesis components for Metaimage."""

from .builder import BuildResult, BuildSummary, MetadataImageBuilder
from .classifier import AssetDescriptor, MetadataCategory, classify_asset
from .discovery import DiscoveredAsset, discover_metadata_assets
from .loader import LoaderOptions, generate_metadata_image_module
from .naming import NamingInfo, interpolate_name, resolve_naming
from .probe import ImageSize, InvalidImageFormatError, get_image_size

__all__ = [
    "AssetDescriptor",
    "BuildResult",
    "BuildSummary",
    "DiscoveredAsset",
    "ImageSize",
    "InvalidImageFormatError",
    "LoaderOptions",
    "MetadataCategory",
    "MetadataImageBuilder",
    "NamingInfo",
    "classify_asset",
    "discover_metadata_assets",
    "generate_metadata_image_module",
    "get_image_size",
    "interpolate_name",
    "resolve_naming",
]
