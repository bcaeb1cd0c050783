def makeregprefix(key):
    regstr = [".","+","*","?","|","^","$",]
    for regkey in regstr:
        if key == regkey:
            return r"\{}".format(key)
    return key
VARIABLE_PREFIX = "$"
COMMENT_PREFIX = "#"
GROUP_OPEN = "("
GROUP_CLOSE = ")"

VARIABLE_REGPREFIX = makeregprefix(VARIABLE_PREFIX)
