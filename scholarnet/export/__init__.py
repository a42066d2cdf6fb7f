from .formats import render, render_paper, paper_to_json, papers_to_json
