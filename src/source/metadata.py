"""Runtime metadata decoding.

This module turns SCALE-encoded runtime metadata into the list of
storage partition (pallet) names used to derive migration prefixes.
A pinned ``modules.json`` list takes precedence over live metadata.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from scalecodec.base import RuntimeConfiguration, ScaleBytes
from scalecodec.type_registry import load_type_registry_preset

from core.errors import ForkSourceError


def decode_partition_names(metadata_hex: str) -> list[str]:
    """Decode runtime metadata and return names of pallets with storage.

    Args:
        metadata_hex: Hex result of ``state_getMetadata``.

    Returns:
        Pallet names in metadata order.

    Raises:
        ForkSourceError: If metadata cannot be decoded.
    """
    runtime_config = RuntimeConfiguration()
    runtime_config.update_type_registry(load_type_registry_preset("core"))
    try:
        metadata = runtime_config.create_scale_object(
            "MetadataVersioned", data=ScaleBytes(metadata_hex)
        )
        metadata.decode()
    except Exception as error:
        raise ForkSourceError(f"Failed to decode runtime metadata: {error}") from error
    return partition_names_from_metadata(metadata.value)


def partition_names_from_metadata(metadata_value: Any) -> list[str]:
    """Extract storage-bearing pallet names from decoded metadata.

    Accepts the ``(magic, {"V<n>": {...}})`` shape produced by the decoder
    as well as a bare versioned mapping. Pallets live under ``pallets``
    from V14 onwards and under ``modules`` before that.

    Args:
        metadata_value: Decoded metadata value.

    Returns:
        Pallet names whose storage section is present.

    Raises:
        ForkSourceError: If the value has no recognizable pallet list.
    """
    versioned = metadata_value
    if isinstance(versioned, (list, tuple)):
        if not versioned:
            raise ForkSourceError("Runtime metadata is empty.")
        versioned = versioned[-1]
    body = _unwrap_version(versioned)
    pallets = body.get("pallets", body.get("modules"))
    if not isinstance(pallets, list):
        raise ForkSourceError("Runtime metadata has no pallet list.")
    return [
        str(pallet["name"])
        for pallet in pallets
        if isinstance(pallet, Mapping) and pallet.get("storage")
    ]


def load_module_names(module_names_path: Path) -> list[str] | None:
    """Load a pinned partition name list if present.

    Args:
        module_names_path: Path to a JSON array of pallet names.

    Returns:
        Pinned names, or None when the file does not exist.

    Raises:
        ForkSourceError: If the file is not a JSON array of strings.
    """
    if not module_names_path.exists():
        return None
    try:
        payload = json.loads(module_names_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ForkSourceError(
            f"Invalid module names file {module_names_path}: {error.msg}"
        ) from error
    except (UnicodeDecodeError, OSError) as error:
        raise ForkSourceError(
            f"Cannot read module names file {module_names_path}: {error}"
        ) from error
    if not isinstance(payload, list) or not all(isinstance(name, str) for name in payload):
        raise ForkSourceError(
            f"Invalid module names file {module_names_path}: expected JSON array of strings."
        )
    return list(payload)


def _unwrap_version(versioned: Any) -> Mapping[str, Any]:
    if not isinstance(versioned, Mapping):
        raise ForkSourceError("Runtime metadata has unexpected shape.")
    if "pallets" in versioned or "modules" in versioned:
        return versioned
    if len(versioned) == 1:
        (body,) = versioned.values()
        if isinstance(body, Mapping):
            return body
    raise ForkSourceError("Runtime metadata has unexpected shape.")
