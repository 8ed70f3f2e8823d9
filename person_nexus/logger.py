import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def get_logger(name: str) -> logging.Logger:
	"""
	Retorna um logger nomeado com StreamHandler no formato padrão do projeto.
	O handler é anexado uma única vez por logger.
	Parâmetros:
		name (str): nome do logger (normalmente __name__)
	Retorno:
		logging.Logger: logger configurado
	"""
	logger = logging.getLogger(name)
	level_name = os.getenv("PERSON_NEXUS_LOG_LEVEL", "INFO").upper()
	logger.setLevel(getattr(logging, level_name, logging.INFO))
	if not logger.handlers:
		handler = logging.StreamHandler()
		handler.setFormatter(logging.Formatter(LOG_FORMAT))
		logger.addHandler(handler)
	return logger
