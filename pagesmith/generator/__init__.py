from pagesmith.generator.build import SiteGenerator
from pagesmith.generator.scaffold import create_project

__all__ = ["SiteGenerator", "create_project"]
