"""Local-network file sharing: mDNS discovery and TCP transfer."""