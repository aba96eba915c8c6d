"""Launch the origin server: ``python main.py --directory /tmp/files``."""

from origin_server.bootstrap.entrypoint import main

if __name__ == "__main__":
    main()
