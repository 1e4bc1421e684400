import logging

import uvicorn
from household.api.api_run import app
from household.utilities import config


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if config.DEBUG else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print(f"Uvicorn running on http://localhost:{config.APP_PORT} (Press CTRL+C to quit)")
    uvicorn.run(app, host=config.APP_HOST, port=config.APP_PORT)
