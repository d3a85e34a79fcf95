no_cache_headers = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': '*',
    'Cache-Control': 'no-cache, no-store, must-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0',
    'Surrogate-Control': 'no-store'
}

placeholder_poster = 'https://via.placeholder.com/300x450/2d3047/ffffff?text=No+Image'

# Cache operation names, first element of every fingerprint
OP_TRENDING = 'trending'
OP_SEARCH = 'search'
OP_DETAILS = 'details'

SUPPORTED_PROVIDERS = ('tmdb', 'omdb')
