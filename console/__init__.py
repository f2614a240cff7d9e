"""
Console hosts for the terrain tools

- controller: command table, argument parsing and pre-checks -> CommandResult
- service: one-shot CLI (python -m console.service <command> [args...])
- server: FastAPI host exposing the same commands over HTTP

Usage examples:
    python -m console.service --config config/params.yaml test island.r32
    python -m console.service stitch-part 16 2 2 0 0
    uvicorn console.server:app --port 8000
"""
