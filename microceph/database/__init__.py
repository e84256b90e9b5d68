"""SQLite-backed store of disks, services, remotes and configuration."""