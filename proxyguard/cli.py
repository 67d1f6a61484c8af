import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError

from proxyguard.config import load_config
from proxyguard.services import admission

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main():
    """HTTPProxy FQDN conflict admission webhook."""


def serve(
    tls_key: Optional[Path] = typer.Option(None, help="Path to the TLS key"),
    tls_cert: Optional[Path] = typer.Option(None, help="Path to the TLS certificate"),
    port: Optional[int] = typer.Option(None, help="Server port"),
    bind_address: Optional[str] = typer.Option(None, help="Address to listen on"),
    ingress_classes: Optional[str] = typer.Option(
        None, help="Comma separated list of ingress class names to validate against"
    ),
    kubeconfig: Optional[Path] = typer.Option(None, help="Kubeconfig to use outside the cluster"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Enable debug logging"),
):
    try:
        config = load_config(
            tls_key_path=tls_key,
            tls_cert_path=tls_cert,
            port=port,
            bind_address=bind_address,
            ingress_classes=ingress_classes,
            kubeconfig=kubeconfig,
            debug=debug,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(2)

    try:
        admission.run(config)
    except Exception:
        sys.exit(1)


app.command(name="serve", help="Serve the HTTPProxy validating webhook.")(serve)

if __name__ == "__main__":
    app()
