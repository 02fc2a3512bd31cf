class EmbedError(Exception):
    """Base for every failure that terminates a run."""

    exit_code = 1


class InvalidArgumentsError(EmbedError):
    # same code argparse uses for usage errors
    exit_code = 2


class InputReadError(EmbedError):
    pass


class OutputWriteError(EmbedError):
    pass


class EncodingError(EmbedError):
    pass


class ModelCheckError(EmbedError):
    pass
