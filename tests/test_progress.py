from datetime import datetime, timedelta, timezone

from bchlight.progress import HeaderProgressLogger


class RecordingLogger:
    def __init__(self):
        self.messages = []

    def info(self, fmt, *args):
        self.messages.append(fmt % args)


def _past(seconds):
    return datetime.now(timezone.utc) - timedelta(seconds=seconds)


def test_no_log_within_interval():
    logger = RecordingLogger()
    progress = HeaderProgressLogger("Processed", "block", logger)
    for height in range(5):
        progress.log_block_height("ts", height)
    assert logger.messages == []


def test_single_entity_logged_after_interval():
    logger = RecordingLogger()
    progress = HeaderProgressLogger("Processed", "block", logger)
    progress.set_last_log_time(_past(11))
    progress.log_block_height("stamp", 5)
    assert len(logger.messages) == 1
    message = logger.messages[0]
    assert message.startswith("Processed 1 block in the last ")
    assert message.endswith("(height 5, stamp)")


def test_plural_and_counter_reset():
    logger = RecordingLogger()
    progress = HeaderProgressLogger("Fetched", "header", logger)
    progress.log_block_height("a", 1)
    progress.log_block_height("b", 2)
    progress.set_last_log_time(_past(12))
    progress.log_block_height("c", 3)
    assert len(logger.messages) == 1
    assert logger.messages[0].startswith("Fetched 3 headers in the last ")

    # The counter and timer restart after a message.
    progress.log_block_height("d", 4)
    assert len(logger.messages) == 1
    progress.set_last_log_time(_past(12))
    progress.log_block_height("e", 5)
    assert logger.messages[1].startswith("Fetched 2 headers in the last ")


def test_duration_formatting_with_minutes():
    logger = RecordingLogger()
    progress = HeaderProgressLogger("Processed", "block", logger)
    progress.set_last_log_time(_past(75))
    progress.log_block_height("ts", 9)
    assert "in the last 1m15" in logger.messages[0]


def test_naive_time_accepted():
    logger = RecordingLogger()
    progress = HeaderProgressLogger("Processed", "block", logger)
    progress.set_last_log_time(datetime.now() - timedelta(seconds=30))
    progress.log_block_height("ts", 1)
    assert len(logger.messages) == 1