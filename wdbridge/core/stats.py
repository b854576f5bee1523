"""Statistics tracking for WD Bridge (wdbridge)."""

from datetime import datetime

COUNTERS = (
    "successful_uploads",
    "failed_uploads",
    "successful_downloads",
    "failed_downloads",
    "uploaded_size",
    "downloaded_size",
    "folders_created",
)


class OperationStats:
    """Counters for the transfers made during one shell session."""

    def __init__(self):
        self.reset()

    def update(self, **kwargs):
        """Add to the named counters; unknown names are ignored."""
        for key, value in kwargs.items():
            if key in self.stats:
                self.stats[key] += value

    def get_stats(self):
        """Get a copy of current statistics."""
        return self.stats.copy()

    def reset(self):
        self.stats = dict.fromkeys(COUNTERS, 0)
        self.stats["start_time"] = datetime.now()

    def get_success_rate(self):
        """Calculate success rate as a percentage."""
        stats = self.stats
        successful = stats["successful_uploads"] + stats["successful_downloads"]
        attempted = successful + stats["failed_uploads"] + stats["failed_downloads"]

        if attempted == 0:
            return 0.0
        return successful * 100 / attempted

    def get_duration(self):
        return datetime.now() - self.stats["start_time"]
