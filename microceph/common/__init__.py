"""Host helpers: networking, storage checks, files, sets and bootstrap settings."""