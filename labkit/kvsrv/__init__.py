"""Argument and reply types of the key/value service calls."""