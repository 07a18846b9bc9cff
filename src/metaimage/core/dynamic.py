"""Wrapper modules for dynamically generated metadata images."""

from __future__ import annotations

import logging

from metaimage.core.classifier import AssetDescriptor, MetadataCategory
from metaimage.core.codegen import attribute_mapping, render_module, statements
from metaimage.core.exports import collect_exported_names
from metaimage.core.naming import NamingInfo
from metaimage.runtime import METADATA_ID_PARAM, METADATA_IMAGE_META_TAG

logger = logging.getLogger(__name__)

VARIANTS_HOOK = "generate_image_metadata"

DYNAMIC_TEMPLATE = """
import inspect
from collections.abc import Mapping

from metaimage.runtime import fill_metadata_segment, load_image_module

_source = load_image_module(__RESOURCE_PATH__, __RESOURCE_TAG__)
image_module = __IMAGE_MODULE__


def _field(fields, name):
    if isinstance(fields, Mapping):
        return fields.get(name)
    return getattr(fields, name, None)


async def default(props):
    params = {key: value for key, value in props["params"].items() if key != __METADATA_ID__}
    image_url = fill_metadata_segment(__PATHNAME_PREFIX__, params, __PAGE_SEGMENT__)

    def image_metadata(fields, id_param):
        data = {
            "alt": _field(fields, "alt"),
            "type": _field(fields, "content_type") or "image/png",
            "url": image_url + ("/" + id_param if id_param else "") + __HASH_QUERY__,
        }
        size = _field(fields, "size")
        if size:
            __APPLY_SIZE__
        return data

    generate_image_metadata = image_module.get(__VARIANTS_HOOK__)
    if generate_image_metadata is not None:
        variants = generate_image_metadata({"params": params})
        if inspect.isawaitable(variants):
            variants = await variants
        results = []
        for index, variant in enumerate(variants):
            variant_id = _field(variant, "id")
            results.append(image_metadata(variant, str(index if variant_id is None else variant_id)))
        return results
    return [image_metadata(image_module, "")]
"""

_NUMERIC_SIZE = """
data["width"] = _field(size, "width")
data["height"] = _field(size, "height")
"""

_STRING_SIZE = """
data["sizes"] = f"{_field(size, 'width')}x{_field(size, 'height')}"
"""


async def build_dynamic_module(
    asset: AssetDescriptor,
    naming: NamingInfo,
    *,
    pathname_prefix: str,
) -> str:
    """Emit a module that asks the source for its image variants at request time.

    The source is inspected statically here and loaded again at request time
    under its own module identity, separate from any other import of the file.
    """

    if asset.category is MetadataCategory.FAVICON:
        logger.warning(
            "Dynamic favicon %s is untested; it is emitted without a hash query.",
            asset.resource_path,
        )

    exported = await collect_exported_names(asset.resource_path)

    return render_module(
        DYNAMIC_TEMPLATE,
        {
            "__RESOURCE_PATH__": str(asset.resource_path.resolve()),
            "__RESOURCE_TAG__": METADATA_IMAGE_META_TAG,
            "__IMAGE_MODULE__": attribute_mapping("_source", exported),
            "__METADATA_ID__": METADATA_ID_PARAM,
            "__PATHNAME_PREFIX__": pathname_prefix,
            "__PAGE_SEGMENT__": naming.path_segment,
            "__HASH_QUERY__": naming.hash_query,
            "__APPLY_SIZE__": statements(
                _NUMERIC_SIZE if asset.category.numeric_sizes else _STRING_SIZE
            ),
            "__VARIANTS_HOOK__": VARIANTS_HOOK,
        },
    )
