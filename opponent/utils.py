def color_text(text, color_code):
    return f"\033[{color_code}m{text}\033[0m"

def debug_text(text):
    return f"{color_text('DEBUG', '31')} {text}"

def info_text(text):
    return f"{color_text('INFO', '34')}  {text}"

def result_text(text):
    return f"{color_text('RESULT ', '32')} {text}"

def console_logger(quiet=False):
    """Return a logger callable printing debug lines, or a no-op when ``quiet``."""
    if quiet:
        return lambda *_: None
    return lambda message: print(debug_text(message))
