"""
waybackdocs: Wayback Machine document downloader

Lists every capture the Internet Archive holds for a domain, keeps the
PDF/DOC/DOCX documents and downloads them through a small paced worker pool.
"""

__version__ = "1.0.0"
__author__ = "waybackdocs Project"
__description__ = "Wayback Machine document downloader"
