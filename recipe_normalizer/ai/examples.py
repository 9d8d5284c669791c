"""
Example recipes for few-shot extraction with LangExtract.

Every extraction_text is copied verbatim from its example text so that
LangExtract can align it.
"""
from langextract.data import ExampleData, Extraction


RECIPE_EXAMPLES = [
    ExampleData(
        text="""
Chocolate Chip Cookies

Soft and chewy cookies that are ready in half an hour.

Makes 24 cookies. Prep time: 10 minutes. Bake time: 12 minutes.

Ingredients:
- 2 1/4 cups all-purpose flour
- 1 tsp baking soda
- 1 cup butter, softened
- 3/4 cup granulated sugar
- 2 large eggs
- 2 cups chocolate chips

Instructions:
1. Preheat the oven to 375°F.
2. Cream the butter and sugar, then beat in the eggs.
3. Stir in flour and baking soda, then fold in the chocolate chips.
4. Bake for 9 to 12 minutes until golden.

Tags: dessert, baking
""",
        extractions=[
            Extraction(
                extraction_class="title",
                extraction_text="Chocolate Chip Cookies"
            ),
            Extraction(
                extraction_class="description",
                extraction_text="Soft and chewy cookies that are ready in half an hour."
            ),
            Extraction(
                extraction_class="servings",
                extraction_text="Makes 24 cookies",
                attributes={"count": "24"}
            ),
            Extraction(
                extraction_class="prep_time",
                extraction_text="Prep time: 10 minutes",
                attributes={"minutes": "10"}
            ),
            Extraction(
                extraction_class="cook_time",
                extraction_text="Bake time: 12 minutes",
                attributes={"minutes": "12"}
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="2 1/4 cups all-purpose flour"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="1 tsp baking soda"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="1 cup butter, softened"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="3/4 cup granulated sugar"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="2 large eggs"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="2 cups chocolate chips"
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Preheat the oven to 375°F."
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Cream the butter and sugar, then beat in the eggs."
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Stir in flour and baking soda, then fold in the chocolate chips."
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Bake for 9 to 12 minutes until golden."
            ),
            Extraction(
                extraction_class="keyword",
                extraction_text="dessert"
            ),
            Extraction(
                extraction_class="keyword",
                extraction_text="baking"
            ),
        ]
    ),

    ExampleData(
        text="""
Pizza mit Tomatensauce

Für 4 Portionen. Zubereitungszeit: 1 Std. 30 Min.

Für den Teig:
500 g Mehl
300 ml Wasser, lauwarm
1 TL Salz
7 g Hefe

Für den Belag:
200 g Tomatensauce
300 g Mozzarella
Basilikum

Teig:
Mehl, Wasser, Salz und Hefe zu einem glatten Teig kneten.
Den Teig eine Stunde gehen lassen.

Belag:
Den Teig ausrollen und mit Tomatensauce bestreichen.
Mit Mozzarella belegen und 12 Minuten bei 250 °C backen.
""",
        extractions=[
            Extraction(
                extraction_class="title",
                extraction_text="Pizza mit Tomatensauce"
            ),
            Extraction(
                extraction_class="servings",
                extraction_text="Für 4 Portionen",
                attributes={"count": "4"}
            ),
            Extraction(
                extraction_class="total_time",
                extraction_text="Zubereitungszeit: 1 Std. 30 Min.",
                attributes={"minutes": "90"}
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="500 g Mehl"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="300 ml Wasser, lauwarm"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="1 TL Salz"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="7 g Hefe"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="200 g Tomatensauce"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="300 g Mozzarella"
            ),
            Extraction(
                extraction_class="ingredient",
                extraction_text="Basilikum"
            ),
            Extraction(
                extraction_class="section",
                extraction_text="Teig"
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Mehl, Wasser, Salz und Hefe zu einem glatten Teig kneten."
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Den Teig eine Stunde gehen lassen."
            ),
            Extraction(
                extraction_class="section",
                extraction_text="Belag"
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Den Teig ausrollen und mit Tomatensauce bestreichen."
            ),
            Extraction(
                extraction_class="step",
                extraction_text="Mit Mozzarella belegen und 12 Minuten bei 250 °C backen."
            ),
        ]
    ),
]
