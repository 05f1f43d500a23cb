from aiohttp import web


@web.middleware
async def cors_middleware(request, handler):
    """
    Middleware to handle CORS and the mandatory OPTIONS preflight.
    """
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        response = await handler(request)

    # Using "*" keeps shared caches consistent for all origins
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = (
        "Content-Type, If-None-Match, If-Modified-Since, X-Hub-Signature-256"
    )
    response.headers["Access-Control-Expose-Headers"] = "*"

    return response
