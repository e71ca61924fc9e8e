"""CLI entry point to launch the garden-supply shop demo."""

from __future__ import annotations


def main(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Start the demo on http://127.0.0.1:8080."""
    import uvicorn

    from specrules.demo.app import app

    print(f"Starting Compost & Co. demo at http://{host}:{port}")
    print(f"Settings page: http://{host}:{port}/admin/speculation-rules")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
