# packswitch/server.py
from __future__ import annotations

import logging

import uvicorn

from packswitch.app.factory import createApp
from packswitch.app.settings import settings

# Basic logging setup, before settings are read to configure logging properly
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = createApp()



def main() -> None:
    host = str(settings("http.host", "127.0.0.1"))
    port = int(settings("http.port", 8127))
    logger.info("Serving packswitch on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)



if __name__ == "__main__":
    main()
