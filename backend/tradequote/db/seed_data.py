"""Reference data loaded by ``init_db.seed_reference_data``."""

TRADES = [
    ("carpentry", "Carpentry"),
    ("painting", "Painting"),
    ("tile", "Tile"),
    ("house_cleaning", "House Cleaning"),
]

# (trade slug, specialty slug, name)
SPECIALTIES = [
    ("carpentry", "finish", "Finish Carpentry"),
    ("carpentry", "deck", "Deck"),
    ("carpentry", "stairs", "Stairs"),
    ("carpentry", "doors", "Doors"),
    ("carpentry", "windows", "Windows"),
    ("carpentry", "baseboard", "Baseboard / Trim"),
    ("carpentry", "flooring", "Floor"),
    ("carpentry", "framing", "Frame"),
    ("carpentry", "roofing", "Roof"),
    ("painting", "general", "Painting"),
    ("tile", "general", "Tile"),
    ("house_cleaning", "general", "House Cleaning"),
]

REGIONS = [
    ("MA", "Massachusetts"),
    ("RI", "Rhode Island"),
]

# Trade-wide base prices per unit, seeded for MA
PRICING_RULES = {
    "carpentry": {"LF": "8.00", "EA": "150.00", "SF": "12.00", "HR": "65.00", "JOB": "500.00"},
    "painting": {"SF": "2.50", "LF": "3.50", "EA": "80.00", "HR": "65.00"},
    "tile": {"SF": "12.00", "EA": "50.00", "HR": "65.00"},
    "house_cleaning": {"JOB": "300.00", "EA": "30.00", "HR": "65.00"},
}

# (trade slug, specialty slug, category, name, pricing unit, unit price)
SERVICES = [
    ("carpentry", "baseboard", "Trim", "Baseboard", "LF", "6.00"),
    ("carpentry", "baseboard", "Trim", "Crown Molding", "LF", "10.00"),
    ("carpentry", "baseboard", "Trim", "Interior Door Trim (only)", "EA", "140.00"),
    ("carpentry", "baseboard", "Trim Ext", "Exterior Window Trim (PVC/EZ)", "EA", "110.00"),
    ("carpentry", "baseboard", "Trim Ext", "Exterior Shiplap", "SF", "18.00"),
    ("carpentry", "doors", "Doors", "Install/Adjust Interior Door (no trim)", "EA", "120.00"),
    ("carpentry", "doors", "Doors", "Interior Door Complete (install + trim)", "EA", "180.00"),
    ("carpentry", "doors", "Doors Ext", "Install Exterior Door (standard)", "EA", "450.00"),
    ("carpentry", "doors", "Doors Ext", "Large Door (French/Slider/Double)", "EA", "700.00"),
    ("carpentry", "windows", "Windows", "Interior Window Complete (box + trim)", "EA", "280.00"),
    ("carpentry", "windows", "Windows", "Window Installation", "EA", "280.00"),
    ("carpentry", "windows", "Jamb", "Full Interior Box - Window", "EA", "180.00"),
    ("carpentry", "stairs", "Stairs", "Treads / Steps", "EA", "75.00"),
    ("carpentry", "stairs", "Stairs", "Risers", "EA", "45.00"),
    ("carpentry", "stairs", "Stairs", "Skirt Top Molding", "LF", "18.00"),
    ("carpentry", "stairs", "Handrail", "Handrail - Wood (interior)", "LF", "70.00"),
    ("carpentry", "stairs", "Handrail", "Handrail Bracket (standard)", "EA", "25.00"),
    ("carpentry", "finish", "Shiplap", "Shiplap - Wall (interior)", "SF", "10.00"),
    ("carpentry", "finish", "Kitchen", "Cabinets Install - Simple", "LF", "80.00"),
    ("carpentry", "finish", "Kitchen", "Microwave Installation", "EA", "150.00"),
    ("carpentry", "finish", "Extras", "Fireplace Frame (frame only)", "JOB", "850.00"),
    ("carpentry", "finish", "Extras", "Small Fixes / Hourly", "HR", "65.00"),
    ("carpentry", "deck", "Deck", "Deck - Wood (PT/Pine/Cedar)", "SF", "45.00"),
    ("carpentry", "deck", "Deck", "Deck - PVC/Synthetic (Trex/Azek)", "SF", "65.00"),
    ("carpentry", "deck", "Deck", "Deck Frame (structure)", "SF", "18.00"),
    ("carpentry", "deck", "Railing", "Railing - Exterior Wood", "LF", "90.00"),
    ("carpentry", "flooring", "Flooring", "Hardwood Floor - Install", "SF", "8.00"),
    ("carpentry", "flooring", "Flooring", "Laminate - Install", "SF", "3.50"),
    ("carpentry", "flooring", "Transitions", "Threshold / Reducer Strip", "EA", "40.00"),
    ("carpentry", "framing", "Framing", "Wall Framing - Interior", "LF", "12.00"),
    ("carpentry", "framing", "Framing", "Header / Beam Install", "EA", "350.00"),
    ("carpentry", "framing", "Structure", "Subfloor - Install / Replace", "SF", "5.00"),
    ("carpentry", "roofing", "Roofing", "Shingle Install - Architectural", "SQ", "450.00"),
    ("carpentry", "roofing", "Roofing", "Roof Tear-Off (1 layer)", "SQ", "150.00"),
    ("carpentry", "roofing", "Flashing", "Drip Edge", "LF", "6.00"),
    ("painting", "general", "Interior Paint", "Interior Walls - Standard", "SF", "2.00"),
    ("painting", "general", "Interior Paint", "Trim / Baseboard Paint", "LF", "3.00"),
    ("painting", "general", "Exterior Paint", "Exterior Walls - Standard", "SF", "3.00"),
    ("painting", "general", "Prep", "Scraping / Sanding Prep", "HR", "65.00"),
    ("tile", "general", "Floor Tile", "Floor Tile - Standard (up to 12x24)", "SF", "10.00"),
    ("tile", "general", "Wall Tile", "Wall Tile - Backsplash", "SF", "14.00"),
    ("tile", "general", "Extras", "Tile Removal (existing)", "SF", "4.50"),
    ("house_cleaning", "general", "Standard Clean", "Standard House Clean - Small (up to 1500 SF)", "JOB", "180.00"),
    ("house_cleaning", "general", "Deep Clean", "Deep Clean - Medium (1500-2500 SF)", "JOB", "480.00"),
    ("house_cleaning", "general", "Move-Out", "Move-Out Clean - Standard", "JOB", "380.00"),
    ("house_cleaning", "general", "Extras", "Window Cleaning (per window)", "EA", "12.00"),
    ("house_cleaning", "general", "Extras", "Garage / Basement Cleanout", "HR", "65.00"),
]

# (username, default password, company role, global role, company name)
DEMO_USERS = [
    ("mateus", "owner123", "OWNER", "support_admin", "Mateus Santana Finish Carpentry"),
    ("brother", "owner123", "OWNER", "user", "Brother's Carpentry"),
    ("admin", "admin123", "ADMIN", "support_admin", "Mateus Santana Finish Carpentry"),
    ("user", "user123", "USER", "user", "Mateus Santana Finish Carpentry"),
    ("houseclean1", "test1234", "OWNER", "user", "Clean Pro House Cleaning"),
]

# (company name, trade slug)
DEMO_COMPANIES = [
    ("Mateus Santana Finish Carpentry", "carpentry"),
    ("Brother's Carpentry", "carpentry"),
    ("Clean Pro House Cleaning", "house_cleaning"),
]
