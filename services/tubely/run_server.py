import uvicorn

from services.tubely.config import load_config


def main() -> None:
    cfg = load_config()
    uvicorn.run(
        "services.tubely.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=cfg.port,
    )


if __name__ == "__main__":
    main()
