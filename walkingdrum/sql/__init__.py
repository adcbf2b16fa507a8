"""Database row types and the typed queries that read and write them."""