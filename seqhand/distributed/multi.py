"""Run tasks in parallel on a single machine using multiple cores.
"""
import functools

import joblib

from seqhand.log import logger, setup_local_logging
from seqhand.pipeline import datadict as dd


def multiprocessing_aware_logging(f):
    """Ensure worker processes push log records onto the shared queue.

    Expects the configuration and parallel dictionaries as the last two
    positional arguments of the wrapped function.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        config, parallel = args[-2:]
        if parallel.get("log_queue"):
            handler = setup_local_logging(config, parallel)
        else:
            handler = None
        try:
            out = f(*args, **kwargs)
        finally:
            if handler is not None:
                handler.pop_thread()
                if hasattr(handler, "close"):
                    handler.close()
        return out
    return wrapper

def get_parallel(config, num_items=None, parallel=None):
    """Resolve the number of concurrent jobs for a set of items.
    """
    parallel = dict(parallel or {})
    cores = parallel.get("cores") or dd.get_cores(config)
    parallel["cores"] = int(cores)
    num_jobs = parallel["cores"]
    if num_items is not None:
        num_jobs = max(1, min(num_jobs, num_items))
    parallel["num_jobs"] = num_jobs
    return parallel

def run_multicore(fn, items, config, parallel=None):
    """Run the function using multiple cores on the given items to process.

    Each item is a tuple of positional arguments. Results are returned in
    item order.
    """
    items = [x for x in items if x is not None]
    if len(items) == 0:
        return []
    parallel = get_parallel(config, len(items), parallel)
    logger.info("multiprocessing: %s on %s items with %s jobs" %
                (fn.__name__, len(items), parallel["num_jobs"]))
    return list(joblib.Parallel(parallel["num_jobs"], batch_size=1, backend="multiprocessing")(
        joblib.delayed(fn)(*x) for x in items))
