"""
Internet Explorer legacy (pre-WebCache) artifacts.

IE 4-9 keep history, cache and cookie activity in ``index.dat`` files
(``Client UrlCache MMF Ver 5.2``), one per container:

- History.IE5/index.dat           URL and LEAK visit records
- History.IE5/MSHist*/index.dat   daily/weekly history containers
- Temporary Internet Files/Content.IE5/index.dat   cache records with
  a cache directory table and stored HTTP response headers

Usage:
    from histsifter.extractors.ie_legacy.index_dat import ByteSource, decode

    with ByteSource.open(path) as source:
        for record in decode(source):
            ...
"""
