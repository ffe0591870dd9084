import logging
from collections import deque


class ParserLogger:

    _max_msgs: int = 20

    def __init__(self, name):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Prevent double handlers when modules reload
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("[FPARSE] [%(levelname)s] %(message)s")
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

        self.logger.propagate = False

        self.info_buffer = deque(maxlen=ParserLogger._max_msgs)

    def debug(self, msg):
        self.logger.debug(msg)

    def info(self, msg):
        self.logger.info(msg)
        self.info_buffer.append(("INFO", str(msg)))

    def warn(self, msg):
        self.logger.warning(msg)
        self.info_buffer.append(("WARNING", str(msg)))

    def error(self, msg, exc: Exception = None):
        if exc is not None:
            self.logger.error(msg, exc_info=exc)
            self.info_buffer.append(("ERROR", f"{msg}: {exc}"))
        else:
            self.logger.error(msg)
            self.info_buffer.append(("ERROR", str(msg)))

    def drain(self):
        """Return buffered diagnostics, oldest first, and clear the buffer."""
        msgs = []
        while self.info_buffer:
            lvl, msg = self.info_buffer.popleft()
            for line in str(msg).split("\n"):
                msgs.append((lvl, line.strip()))
        return msgs


LOGGER = ParserLogger("funcparser")
