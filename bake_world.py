# bake_world.py

"""
================================================================================
OFFLINE PREVIEW BAKER SCRIPT
================================================================================
This script is a command-line tool for baking an overview of a world profile:
it generates a square of chunks around the origin, paints every vertex with
its biome color into a single PNG, and writes a JSON manifest with per-biome
and per-object-kind statistics. It is a slow, one-time process intended for
tuning profiles, not part of the streaming runtime.

Usage:
    python bake_world.py --profile world --radius 8
    python bake_world.py --config path/to/config.json --workers 4
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import collections
import multiprocessing
import numpy as np
from PIL import Image
from tqdm import tqdm

from roadworld.biomes import BIOMES_BY_CODE
from roadworld.generator import ChunkGenerator, ChunkRecord
from roadworld.profiles import ProfileError, load_profile


def create_biome_color_lut() -> np.ndarray:
    """A (n_biomes, 3) uint8 lookup table from biome code to RGB."""
    return np.array([biome.rgb for biome in BIOMES_BY_CODE], dtype=np.uint8)


def chunk_color_tile(record: ChunkRecord, lut: np.ndarray) -> np.ndarray:
    """
    The chunk's per-vertex biome colors as an image tile (rows = z, cols = x).
    The last row and column are dropped because they repeat the first row and
    column of the neighbouring chunks.
    """
    codes = np.asarray(record.biome_codes)[:-1, :-1]
    return lut[codes.T]


# --- Global variables for worker processes ---
worker_generator = None


def init_worker(profile_name, overrides):
    """Initializes the global state for each worker process."""
    global worker_generator
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = ChunkGenerator(load_profile(profile_name, overrides), worker_logger)


def process_chunk(coords):
    """Generates one chunk and returns its color tile plus minimal metadata."""
    cx, cz = coords
    record = worker_generator.generate_chunk(cx, cz)
    return {
        'cx': cx,
        'cz': cz,
        'tile': chunk_color_tile(record, create_biome_color_lut()),
        'biome': record.biome.label,
        'object_kinds': collections.Counter(obj.kind.value for obj in record.objects),
    }


def load_bake_config(config_path: str) -> tuple:
    """Reads {"profile": ..., "overrides": {...}} from a JSON file."""
    with open(config_path, 'r') as f:
        config = json.load(f)
    return config.get('profile', 'regional'), config.get('overrides', {})


# --- Main Baking Function ---
def bake_world(profile_name: str, overrides: dict, radius: int, workers: int, output_dir: str) -> dict:
    """
    Generates the (2r+1)^2 chunks around the origin and saves the overview
    image and manifest to output_dir. Returns the manifest.
    """
    logger = logging.getLogger("Baker")

    # 1. --- Validate the Profile before spawning any worker ---
    profile = load_profile(profile_name, overrides)
    tile_size = profile.vertex_resolution - 1
    side = 2 * radius + 1
    tasks = [(cx, cz) for cz in range(-radius, radius + 1) for cx in range(-radius, radius + 1)]
    logger.info(f"Baking {len(tasks)} chunks of profile '{profile.name}' ({side}x{side} around the origin)...")

    # 2. --- Main Baking Loop (Parallelized) ---
    image = np.zeros((side * tile_size, side * tile_size, 3), dtype=np.uint8)
    biome_stats = collections.Counter()
    object_stats = collections.Counter()
    start_time = time.perf_counter()

    num_workers = max(1, workers)
    logger.info(f"Using {num_workers} worker processes.")
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker,
                              initargs=(profile_name, overrides)) as pool:
        for result in tqdm(pool.imap_unordered(process_chunk, tasks), total=len(tasks), desc="Baking Chunks"):
            col = result['cx'] + radius
            # North (positive z) at the top of the image.
            row = side - 1 - (result['cz'] + radius)
            tile = result['tile'][::-1]
            image[row * tile_size:(row + 1) * tile_size, col * tile_size:(col + 1) * tile_size] = tile
            biome_stats[result['biome']] += 1
            object_stats.update(result['object_kinds'])

    # --- Finalization ---
    os.makedirs(output_dir, exist_ok=True)
    image_path = os.path.join(output_dir, f"{profile.name}_biomes.png")
    Image.fromarray(image, 'RGB').save(image_path, 'PNG')

    manifest = {
        'profile': profile.name,
        'seed': profile.seed,
        'radius_chunks': radius,
        'chunk_size': profile.chunk_size,
        'image': os.path.basename(image_path),
        'chunk_biomes': dict(biome_stats),
        'objects': dict(object_stats),
    }
    manifest_path = os.path.join(output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    for label, count in biome_stats.most_common():
        logger.info(f"  - {label}: {count} chunks")
    logger.info(f"Overview and manifest.json saved to: {output_dir}")
    return manifest


# --- Command-Line Interface ---
def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline preview baker for roadworld profiles.")
    parser.add_argument("--profile", type=str, default=None, help="Named world profile to bake.")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a JSON file with 'profile' and 'overrides' keys.")
    parser.add_argument("--radius", type=int, default=4, help="Chunks to bake on each side of the origin.")
    parser.add_argument("--workers", type=int, default=max(1, multiprocessing.cpu_count() - 1),
                        help="Number of worker processes.")
    parser.add_argument("--output", type=str, default="baked_previews", help="Output directory.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    profile_name, overrides = 'regional', {}
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            profile_name, overrides = load_bake_config(args.config)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return 1
    if args.profile:
        profile_name = args.profile

    try:
        bake_world(profile_name, overrides, args.radius, args.workers, args.output)
    except ProfileError as e:
        logger.critical(f"Invalid profile: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
