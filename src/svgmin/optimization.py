# src/svgmin/optimization.py
import os
import random
from functools import partial
from multiprocessing import Pool
from typing import Any, Dict, List, Tuple

from tqdm import tqdm

from .svg_optimizer import optimize_svg_from_file


def collect_tasks(input_dir, output_dir) -> List[Tuple[str, str]]:
    """
    Recursively find SVG files in `input_dir` and pair each with its path
    under `output_dir` (preserving directory structure).
    """
    tasks = []
    for root, _, files in os.walk(input_dir):
        for file in sorted(files):
            if file.lower().endswith('.svg'):
                input_file = os.path.join(root, file)
                rel_path = os.path.relpath(root, input_dir)
                output_file = os.path.normpath(os.path.join(output_dir, rel_path, file))
                tasks.append((input_file, output_file))
    return tasks


def process_file(task, params=None, quiet=False) -> Dict[str, Any]:
    """
    Optimize a single SVG file.

    :param task: A tuple (input_file, output_file)
    :param params: Transform minification parameters.
    """
    input_file, output_file = task
    result = {'filename': input_file}
    try:
        optimized = optimize_svg_from_file(input_file, quiet=quiet, **(params or {}))
        if optimized is None:
            result['error'] = "optimization failed"
            return result
        os.makedirs(os.path.dirname(output_file), exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(optimized)
        result['saved'] = os.path.getsize(input_file) - os.path.getsize(output_file)
    except (OSError, UnicodeDecodeError) as e:
        if not quiet:
            print(f"Exception processing {input_file}: {e}")
        result['error'] = str(e)
    return result


def optimize_svg_dir(input_dir, output_dir, params=None, max_samples=None, num_threads=4, quiet=False):
    """
    Optimize every SVG file under `input_dir`, writing results to `output_dir`.

    :param input_dir: Directory with input SVG files.
    :param output_dir: Directory where optimized files will be stored.
    :param params: Transform minification parameters.
    :param max_samples: Maximum number of files to process (randomly selected) if provided.
    :param num_threads: Number of parallel processes to run.
    """
    input_dir = os.path.abspath(input_dir)
    output_dir = os.path.abspath(output_dir)
    os.makedirs(output_dir, exist_ok=True)

    tasks = collect_tasks(input_dir, output_dir)
    if max_samples is not None:
        tasks = random.sample(tasks, min(max_samples, len(tasks)))

    if not quiet:
        print(f"Optimizing {len(tasks)} files...")

    results = []
    with Pool(num_threads) as pool:
        worker = partial(process_file, params=params, quiet=quiet)
        for res in tqdm(pool.imap_unordered(worker, tasks),
                        total=len(tasks),
                        desc="Minifying transforms",
                        disable=quiet):
            results.append(res)

    failed = [r for r in results if 'error' in r]
    saved = sum(r.get('saved', 0) for r in results)
    print(f"Processed {len(results)} files, failed: {len(failed)}, saved {saved} bytes")
    if not quiet:
        for i, f in enumerate(failed[:10]):
            print(f"{i+1}. {f['filename']}: {f['error']}")
        if len(failed) > 10:
            print(f"... and {len(failed) - 10} more failures")
    return results
