from __future__ import annotations
import logging
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Mapping, Optional

from .assets import ASSET_KINDS, camelize, get_asset_type, get_formatted_url, get_language

log = logging.getLogger(__name__)

# handler(file_path, group, type, nested, is_default)
_AssetHandler = Callable[[str, str, str, bool, bool], None]

DEFAULT_DEVICE = "desktop"

_PRELOAD_DEFAULTS: Dict[str, Any] = {
    "type": "preload",
    "message": "The experiment is loading",
    "show_progress_bar": True,
    "continue_after_error": False,
    "error_message": "",
    "show_detailed_errors": True,
    "max_load_time": None,
    "on_error": None,
    "on_success": None,
}


def _walk_group(group: str, group_obj: Any, handle: _AssetHandler, is_default: bool = False) -> None:
    if isinstance(group_obj, list):
        for fp in group_obj:
            handle(fp, group, "default", False, is_default)
        return
    if not isinstance(group_obj, Mapping):
        log.warning("skipping asset group %s: expected list or mapping", group)
        return

    lang = group_obj.get("languageSpecific")
    if lang:
        if isinstance(lang, list):
            for fp in lang:
                handle(fp, group, "languageSpecific", False, is_default)
        else:
            for kind, paths in lang.items():
                for fp in paths:
                    handle(fp, group, kind, True, is_default)

    for fp in group_obj.get("device") or []:
        handle(fp, group, "device", False, is_default)

    shared = group_obj.get("shared")
    if shared:
        if isinstance(shared, list):
            for fp in shared:
                handle(fp, group, "shared", False, is_default)
        else:
            for kind, paths in shared.items():
                asset_type = "shared/device" if kind == "device" else "shared"
                for fp in paths:
                    handle(fp, group, asset_type, False, is_default)


def _walk(asset_json: Mapping[str, Any], handle: _AssetHandler) -> None:
    for group, group_obj in (asset_json.get("preload") or {}).items():
        _walk_group(group, group_obj, handle)
    if asset_json.get("default"):
        _walk_group("default", asset_json["default"], handle, is_default=True)


def generate_asset_object(
    asset_json: Mapping[str, Any],
    bucket_uri: str,
    language: Optional[str] = None,
    device: str = DEFAULT_DEVICE,
) -> Dict[str, Dict[str, str]]:
    """Map every asset to its URL, keyed by camelized file stem.

    >>> generate_asset_object({"default": ["go.png"]}, "https://cdn")["images"]
    {'go': 'https://cdn/go.png'}
    """

    assets: Dict[str, Dict[str, str]] = {kind: {} for kind in ASSET_KINDS}
    lng = get_language(language)

    def _handle(fp: str, group: str, kind: str, nested: bool, is_default: bool) -> None:
        asset_type = get_asset_type(fp)
        key = camelize(PurePosixPath(fp).stem)
        assets[asset_type][key] = get_formatted_url(bucket_uri, fp, lng, device, kind, nested, is_default)

    _walk(asset_json, _handle)
    return assets


def create_preload_trials(
    asset_json: Mapping[str, Any],
    bucket_uri: str,
    language: Optional[str] = None,
    device: str = DEFAULT_DEVICE,
) -> Dict[str, Dict[str, Any]]:
    """Build one jsPsych preload trial per asset group (``default`` included)."""

    trials: Dict[str, Dict[str, Any]] = {}
    lng = get_language(language)

    def _handle(fp: str, group: str, kind: str, nested: bool, is_default: bool) -> None:
        asset_type = get_asset_type(fp)
        url = get_formatted_url(bucket_uri, fp, lng, device, kind, nested, is_default)
        if group not in trials:
            trials[group] = {**_PRELOAD_DEFAULTS, **{kind: [] for kind in ASSET_KINDS}}
        urls: List[str] = trials[group][asset_type]
        urls.append(url)

    _walk(asset_json, _handle)
    log.debug("built preload trials for groups %s", list(trials))
    return trials
