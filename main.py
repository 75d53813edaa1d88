"""Lumia Library — dev launcher. Starts the API server in watch mode."""

import argparse
import asyncio
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13015")


def main():
    parser = argparse.ArgumentParser(description="Lumia Library dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--import", dest="import_path", type=Path, default=None,
                        help="Import a world book JSON file before starting")
    parser.add_argument("--fetch", dest="fetch_url", default=None,
                        help="Fetch and import a world book URL before starting")
    parser.add_argument("--overwrite", action="store_true",
                        help="Replace an existing pack with the same name")
    args = parser.parse_args()

    if args.import_path or args.fetch_url:
        import json

        from lumia import ingest, storage
        storage.init_storage(args.data_dir or Path("data"))
        try:
            if args.import_path:
                data = json.loads(args.import_path.read_text())
                pack = ingest.import_pack(data, args.import_path.stem, overwrite=args.overwrite)
            else:
                pack = asyncio.run(ingest.fetch_world_book(args.fetch_url, overwrite=args.overwrite))
        except ingest.PackExistsError as e:
            sys.exit(f"{e}. Re-run with --overwrite to replace it.")
        except ingest.IngestError as e:
            sys.exit(str(e))
        print(f'Imported "{pack.name}": {len(pack.characters())} Lumia, {len(pack.fragments())} Loom')

    # Build env for the server so it picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    print(f"Starting API on http://localhost:{PORT} ...")
    proc = subprocess.Popen(
        ["uv", "run", "uvicorn", "lumia.app:app", "--reload", "--host", HOST, "--port", PORT],
        cwd=ROOT, env=env,
    )
    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
