"""Terminal interface for discovering peers and transferring files."""