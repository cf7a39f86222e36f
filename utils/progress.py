from typing import Optional
import logging
from tqdm import tqdm
import time

class ProgressMonitor:
    def __init__(self, total: int, desc: str = "Processing",
                 logger: Optional[logging.Logger] = None,
                 disable: bool = False,
                 log_every: int = 25):
        """Initialize progress monitor with total steps and description"""
        self.logger = logger or logging.getLogger('progress')
        self.pbar = tqdm(total=total, desc=desc, disable=disable)
        self.total = total
        self.current = 0
        self.log_every = log_every
        self.start_time = time.time()
        self.description = desc

    def update(self, n: int = 1, status: str = ""):
        """Update progress by n steps with optional status message"""
        self.current += n
        self.pbar.update(n)

        if status:
            self.pbar.set_postfix_str(status)
            self.logger.debug(f"{self.description}: {status}")

        if self.log_every and self.current % self.log_every == 0:
            elapsed = time.time() - self.start_time
            progress = self.current / self.total if self.total else 1.0
            eta = (elapsed / progress) * (1 - progress) if progress > 0 else 0

            self.logger.info(
                f"Progress: {self.current}/{self.total} "
                f"({progress*100:.1f}%) - "
                f"Elapsed: {elapsed:.1f}s - "
                f"ETA: {eta:.1f}s"
            )

    def close(self):
        """Close progress bar and log final statistics"""
        self.pbar.close()
        total_time = time.time() - self.start_time
        self.logger.info(
            f"Completed {self.description} ({self.current} steps) in {total_time:.1f} seconds"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
