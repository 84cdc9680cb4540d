#!/usr/bin/env python3
"""
WebPoint - Development Server
Production runs through gunicorn (see gunicorn.conf.py)
"""
import os
import sys
import socket

from dotenv import load_dotenv
load_dotenv()

from webpoint import create_app, __version__

app = create_app()

FALLBACK_PORTS = (5001, 5002, 8000, 8080)


def port_is_free(port, host='127.0.0.1'):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex((host, port)) != 0


def pick_port(preferred):
    """First free port out of the preferred one and the fallbacks"""
    for candidate in (preferred, *FALLBACK_PORTS):
        if port_is_free(candidate):
            return candidate
    return None


def banner(port, debug):
    return (
        f"\n  WebPoint API v{__version__}\n"
        f"  ----------------------------------------\n"
        f"  API:      http://localhost:{port}/api\n"
        f"  Health:   http://localhost:{port}/health\n"
        f"  Sitemap:  http://localhost:{port}/sitemap.xml\n"
        f"  Mode:     {'development' if debug else 'production'}\n"
    )


if __name__ == '__main__':
    wanted = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV', 'development') == 'development'

    port = pick_port(wanted)
    if port is None:
        sys.exit(f"No free port among {wanted}, {', '.join(map(str, FALLBACK_PORTS))}. Set PORT explicitly.")
    if port != wanted:
        print(f"Port {wanted} is busy, serving on {port}")

    print(banner(port, debug))
    app.run(host=os.environ.get('HOST', '0.0.0.0'), port=port, debug=debug)
