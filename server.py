import os
import uvicorn

if __name__ == "__main__":
    env = os.environ.get("ENV", "dev")
    port = int(os.environ.get("PORT", 8000))
    log_level = "debug" if os.environ.get("DEBUG", "false").lower() == "true" else "info"

    if env == "dev":
        uvicorn.run("app.main:app", host="127.0.0.1", port=port, reload=True, log_level=log_level)
    else:
        # Behind the hosting proxy; trust X-Forwarded-* for cookie Secure flags.
        uvicorn.run("app.main:app", host="0.0.0.0", port=port, proxy_headers=True, log_level=log_level)
