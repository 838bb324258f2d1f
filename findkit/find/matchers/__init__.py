"""Matchers that test directory entries by type, size, times, inode, links and path."""