from __future__ import annotations
import argparse, json
from pathlib import Path
from typing import List, Optional

from trial_core.preload import create_preload_trials, generate_asset_object, DEFAULT_DEVICE


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Print jsPsych preload trials for an asset manifest.")
    ap.add_argument("assets", help="asset JSON with 'preload' and/or 'default' sections")
    ap.add_argument("bucket_uri")
    ap.add_argument("--lng", default=None, help="ISO 639-1 language code (default: en)")
    ap.add_argument("--device", default=DEFAULT_DEVICE, choices=("desktop", "mobile"))
    ap.add_argument("--assets", dest="as_assets", action="store_true", help="print the asset object instead")
    args = ap.parse_args(argv)

    data = json.loads(Path(args.assets).read_text(encoding="utf-8"))
    if args.as_assets:
        out = generate_asset_object(data, args.bucket_uri, args.lng, device=args.device)
    else:
        out = create_preload_trials(data, args.bucket_uri, args.lng, device=args.device)
    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
