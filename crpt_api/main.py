from crpt_api.core.app_factory import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Single process: the rate limit is per-process, extra workers would multiply it
    uvicorn.run(app, host="127.0.0.1", port=8000, workers=1, log_config=None)
