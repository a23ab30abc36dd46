"""Run the service with uvicorn: ``python -m xmlcontent_api``."""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description='XML Content JSON Service')
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=8891, help='Port to listen on (default: 8891)')
    parser.add_argument('--workers', type=int, default=1, help='Number of worker processes (default: 1)')
    args = parser.parse_args()

    uvicorn.run('xmlcontent_api.main:app', host=args.host, port=args.port, workers=args.workers)


if __name__ == '__main__':
    main()
