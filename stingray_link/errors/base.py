class StingrayLinkError(Exception):
    pass
