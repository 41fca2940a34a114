"""Utility functionality for logging.
"""
import multiprocessing
import os
import sys

import logbook
import logbook.queues

from seqhand import utils

LOG_NAME = "seqhand"

def get_log_dir(config):
    d = config.get("log_dir", "log")
    return d

logger = logbook.Logger(LOG_NAME)
logger_cl = logbook.Logger(LOG_NAME + "-commands")
mpq = multiprocessing.Queue(-1)

def _is_cl(record, _):
    return record.channel == LOG_NAME + "-commands"

def _not_cl(record, handler):
    return not _is_cl(record, handler)

class CloseableNestedSetup(logbook.NestedSetup):
    def close(self):
        for obj in self.objects:
            if hasattr(obj, "close"):
                obj.close()

class IOSafeMultiProcessingSubscriber(logbook.queues.MultiProcessingSubscriber):
    """Recover from interrupted system call IOErrors that stop logging.
    """
    def recv(self, timeout=None):
        try:
            return super(IOSafeMultiProcessingSubscriber, self).recv(timeout)
        except IOError as e:
            if "Interrupted system call" in str(e):
                return None
            else:
                raise

def _create_log_handler(config):
    logbook.set_datetime_format("utc")
    handlers = [logbook.NullHandler()]
    format_str = "".join(["[{record.time:%Y-%m-%dT%H:%MZ}] " if config.get("include_time", True) else "",
                          "{record.message}"])

    log_dir = get_log_dir(config)
    if log_dir:
        utils.safe_makedir(log_dir)
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s.log" % LOG_NAME),
                                            format_string=format_str, level="INFO",
                                            filter=_not_cl))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s-debug.log" % LOG_NAME),
                                            format_string=format_str, level="DEBUG", bubble=True,
                                            filter=_not_cl))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s-commands.log" % LOG_NAME),
                                            format_string=format_str, level="DEBUG",
                                            filter=_is_cl))
    handlers.append(logbook.StreamHandler(sys.stderr, format_string=format_str, bubble=True,
                                          level="INFO", filter=_not_cl))
    return CloseableNestedSetup(handlers)

def create_base_logger(config=None, parallel=None):
    """Setup base logging configuration, also handling multiprocessing runs.

    For multicore runs creates a subscriber that receives records pushed
    by worker processes and writes them with the local handlers. Returns
    the updated parallel settings and the background subscriber controller,
    which is None for single core runs and is shut down with
    `stop_base_logger`.
    """
    if config is None: config = {}
    if parallel is None: parallel = {}
    cores = parallel.get("cores", 1)
    controller = None
    if cores > 1:
        subscriber = IOSafeMultiProcessingSubscriber(mpq)
        controller = subscriber.dispatch_in_background(_create_log_handler(config))
        parallel["log_queue"] = "multiprocessing"
    else:
        # Do not need to setup anything for local logging
        pass
    return parallel, controller

def stop_base_logger(controller):
    """Stop the background subscriber, writing out records still queued.
    """
    if controller is None:
        return
    controller.stop()
    with controller.setup.threadbound():
        while controller.subscriber.dispatch_once(timeout=0.1):
            pass
    controller.setup.close()

def setup_local_logging(config=None, parallel=None):
    """Setup logging for a local context, directing messages to appropriate base loggers.

    Worker processes of a multicore run push records onto the shared queue
    read by the subscriber from `create_base_logger`.
    """
    if config is None: config = {}
    if parallel is None: parallel = {}
    if parallel.get("log_queue"):
        handler = logbook.queues.MultiProcessingHandler(mpq)
    else:
        handler = _create_log_handler(config)
    handler.push_thread()
    return handler
