import logging
from colorama import Fore, Style

log = logging.getLogger(__name__)


def format_path(path):
    s = path[0]
    for elem in path[1:]:
        if isinstance(elem, int):
            s += f'[{elem}]'
        else:
            s += '.' + str(elem)
    return s


class Result:
    PASS = True
    FAIL = False
    success = PASS

    def start(self, message):
        self.success = self.PASS

    def end(self):
        pass

    def warn(self, message):
        raise NotImplementedError()

    def fail(self, message, path=None):
        raise NotImplementedError()   # pragma: no cover


class RecordResult(Result):
    """Keeps the first failure reason; used while scanning for a matching interaction."""
    reason = None

    def start(self, subject):
        super().start(subject)
        self.reason = None

    def warn(self, message):
        log.debug(message)

    def fail(self, message, path=None):
        self.success = self.FAIL
        if path:
            message += ' at ' + format_path(path)
        log.debug(message)
        if self.reason is None:
            self.reason = message
        return not message


class CaptureResult(Result):
    def __init__(self, *, level=logging.WARNING):
        self.messages = []
        self.level = level

    def start(self, filename):
        super().start(filename)
        log = logging.getLogger('yakusoku')
        log.handlers = [self]
        log.setLevel(logging.DEBUG)
        self.messages[:] = []
        print(f'{Style.BRIGHT}Contract: "{filename}" ... ', end='')

    def end(self):
        if self.success:
            print(Fore.GREEN + 'PASSED')
        else:
            print(Fore.RED + 'FAILED')
        if self.messages:
            print((Fore.RESET + '\n').join(self.messages))

    def warn(self, message):
        log.warning(message)

    def fail(self, message, path=None):
        self.success = self.FAIL
        if path:
            message += ' at ' + format_path(path)
        log.error(message)
        return not message

    def handle(self, record):
        if record.levelno < self.level:
            return
        color = ''
        if record.levelno >= logging.ERROR:
            color = Fore.RED
        elif record.levelno >= logging.WARNING:
            color = Fore.YELLOW
        self.messages.append(' ' + color + record.getMessage())
