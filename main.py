import logging_config
from route_demo import start

if __name__ == "__main__":
    logging_config.configure()
    raise SystemExit(start())
