from loguru import logger as _logger

LoguruLogger = type[_logger]
