def error_kind(response):
    return response.get_json()["error"]["kind"]
